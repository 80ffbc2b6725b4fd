"""
식사 사진 검증 / 압축 / 업로드.

- 허용 형식: JPEG, PNG, WebP (Content-Type + 파일 시그니처 모두 확인)
- 압축: 1920x1920 안으로 축소(확대 없음), progressive JPEG q85
- 업로드: Cloudflare R2(S3 호환, boto3). 설정이 비어 있으면 default_storage
"""
import io
import logging
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class PhotoError(Exception):
    """사진이 잘못됐거나 업로드에 실패한 경우"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def sniff_image_type(data: bytes):
    """파일 앞부분 시그니처로 이미지 형식 판별. 모르면 None"""
    if len(data) < 4:
        return None
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:4] == b"\x89PNG":
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_photo(data: bytes, content_type: str = None) -> str:
    if not data:
        raise PhotoError("No file uploaded")
    if len(data) > settings.MEAL_PHOTO_MAX_BYTES:
        raise PhotoError("File size exceeds 5MB limit")
    if content_type and content_type.lower() not in ALLOWED_CONTENT_TYPES:
        raise PhotoError("Invalid file type. Only JPG, PNG, and WebP images are allowed")
    kind = sniff_image_type(data)
    if kind is None:
        raise PhotoError("Invalid file type. Only JPG, PNG, and WebP images are allowed")
    return kind


def compress_photo(data: bytes) -> bytes:
    side = settings.MEAL_PHOTO_MAX_SIDE
    try:
        with Image.open(io.BytesIO(data)) as image:
            image = image.convert("RGB")
            # thumbnail 은 비율 유지 + 원본보다 크게 만들지 않음
            image.thumbnail((side, side))
            out = io.BytesIO()
            image.save(
                out,
                format="JPEG",
                quality=settings.MEAL_PHOTO_JPEG_QUALITY,
                progressive=True,
                optimize=True,
            )
    except (UnidentifiedImageError, OSError) as e:
        raise PhotoError(f"Failed to process image: {e}")
    return out.getvalue()


def r2_configured() -> bool:
    return all(
        [
            settings.CLOUDFLARE_R2_ENDPOINT,
            settings.CLOUDFLARE_R2_ACCESS_KEY,
            settings.CLOUDFLARE_R2_SECRET_KEY,
            settings.CLOUDFLARE_R2_BUCKET_NAME,
        ]
    )


def _build_r2_client():
    return boto3.client(
        service_name="s3",
        region_name="auto",
        endpoint_url=settings.CLOUDFLARE_R2_ENDPOINT,
        aws_access_key_id=settings.CLOUDFLARE_R2_ACCESS_KEY,
        aws_secret_access_key=settings.CLOUDFLARE_R2_SECRET_KEY,
    )


def upload_meal_photo(data: bytes, user_id) -> str:
    """압축된 JPEG 바이트를 올리고 공개 URL 을 돌려준다"""
    key = f"meals/{user_id}/{int(time.time() * 1000)}.jpg"

    if not r2_configured():
        saved = default_storage.save(key, ContentFile(data))
        logger.info("R2 not configured, saved meal photo locally: %s", saved)
        return default_storage.url(saved)

    if not settings.CLOUDFLARE_R2_PUBLIC_URL:
        raise PhotoError("CLOUDFLARE_R2_PUBLIC_URL is not configured", status_code=500)

    try:
        _build_r2_client().put_object(
            Bucket=settings.CLOUDFLARE_R2_BUCKET_NAME,
            Key=key,
            Body=data,
            ContentType="image/jpeg",
            CacheControl="public, max-age=31536000",
        )
    except (BotoCoreError, ClientError) as e:
        logger.warning("R2 upload failed for %s: %s", key, e)
        raise PhotoError("Failed to upload photo", status_code=500)

    url = f"{settings.CLOUDFLARE_R2_PUBLIC_URL.rstrip('/')}/{key}"
    logger.info("uploaded meal photo to R2: %s", url)
    return url
