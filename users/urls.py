# users/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import RegisterView, UserViewSet

# -------------------------------------------------
# 1) DRF Router (ViewSet)
#    - /api/ 밑에 붙이면 /api/users/ 로 노출
# -------------------------------------------------
router = DefaultRouter()
router.register(r"users", UserViewSet, basename="users")

api_urlpatterns = [
    path("", include(router.urls)),
]

# -------------------------------------------------
# 2) Auth (회원가입 API)
#    - /auth/ 밑에 붙이면 /auth/register/ 로 노출
# -------------------------------------------------
auth_urlpatterns = [
    path("register/", RegisterView.as_view(), name="auth_register"),
]

# 루트 urls.py에서 명시적으로 각 그룹을 원하는 prefix로 include 한다.
urlpatterns = []
