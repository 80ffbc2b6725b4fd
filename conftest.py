# APIClient, 토큰, 유저 등 픽스처
import io

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.urls import reverse
from model_bakery import baker
from PIL import Image
from rest_framework.test import APIClient

User = get_user_model()


@pytest.fixture(autouse=True)
def _clear_cache():
    # 로그인 throttle 카운터가 테스트 사이에 남지 않도록
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _media_tmp(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path / "media")
    settings.OPENROUTER_API_KEY = ""
    settings.CLOUDFLARE_R2_ENDPOINT = ""


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        username="alice", email="a@a.com", password="pw1234!", daily_calorie_goal=2000
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="bob", email="b@b.com", password="pw1234!")


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(username="admin", email="admin@a.com", password="pw1234!", is_staff=True)


@pytest.fixture
def token_pair(api_client, user):
    """POST /auth/login/ -> {'access','refresh', ...}"""
    url = reverse("auth_login")
    resp = api_client.post(url, {"email": "a@a.com", "password": "pw1234!"}, format="json")
    assert resp.status_code == 200, resp.content
    return resp.json()


@pytest.fixture
def access_token(token_pair):
    return token_pair["access"]


@pytest.fixture
def auth_client(api_client, access_token):
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token}")
    return api_client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def bakery():
    return baker


@pytest.fixture
def jpeg_bytes():
    def _make(size=(64, 48), color=(200, 120, 40), fmt="JPEG"):
        buf = io.BytesIO()
        Image.new("RGB", size, color).save(buf, format=fmt)
        return buf.getvalue()

    return _make
