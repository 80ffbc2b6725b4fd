# ai/views.py
import logging
import mimetypes

from rest_framework import exceptions, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from meals.photos import PhotoError, compress_photo, upload_meal_photo, validate_photo
from utils.errors import UPLOAD_FAILED
from utils.exceptions import error_response

from .vision import analyze_meal_photo

logger = logging.getLogger(__name__)

IMAGE_KEYS = ("file", "image", "photo")


def _pick_image_file(request):
    """
    1순위: 지정 키들(IMAGE_KEYS)에서 파일
    2순위: request.FILES 전체에서 첫 번째 image/*
    실패 시 None
    """
    files = request.FILES
    for k in IMAGE_KEYS:
        if k in files:
            return files[k]
    for f in files.values():
        ctype = getattr(f, "content_type", None) or mimetypes.guess_type(getattr(f, "name", ""))[0]
        if ctype and ctype.startswith("image/"):
            return f
    return None


class AIViewSet(viewsets.ViewSet):
    """
    - POST /api/ai/meal-analyze/ : 사진 인식 미리보기 (저장하지 않음)
      * multipart 이미지 업로드 또는 JSON {"image_url": "..."}
    """

    permission_classes = [permissions.IsAuthenticated]
    parser_classes = (MultiPartParser, FormParser, JSONParser)

    @action(detail=False, methods=["post"], url_path="meal-analyze")
    def meal_analyze(self, request):
        image_url = (request.data.get("image_url") or "").strip()

        if not image_url:
            file_obj = _pick_image_file(request)
            if file_obj is None:
                raise exceptions.ValidationError(
                    {"file": "이미지 파일을 업로드하거나 image_url 을 입력해 주세요."}
                )
            try:
                raw = file_obj.read()
                validate_photo(raw, getattr(file_obj, "content_type", None))
                image_url = upload_meal_photo(compress_photo(raw), request.user.id)
            except PhotoError as e:
                if e.status_code >= 500:
                    return error_response(UPLOAD_FAILED, e.status_code)
                raise exceptions.ValidationError({"file": [e.message]})

        result = analyze_meal_photo(image_url)
        logger.info("meal-analyze preview for user %s: success=%s", request.user.id, result.success)
        return Response(
            {
                "image_url": image_url,
                "success": result.success,
                "items": [
                    {
                        "food_name": f.food_name,
                        "portion": f.portion,
                        "calories": f.calories,
                        "confidence": f.confidence,
                    }
                    for f in result.items
                ],
                "total_calories": result.total_calories,
                "error": result.error,
            }
        )
