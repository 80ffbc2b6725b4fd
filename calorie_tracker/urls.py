from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

# 앱별 urls
from users import urls as users_urls

from .auth_views import (
    LoginView,
    PublicTokenRefreshView,
    PublicTokenVerifyView,
)
from .dashboard_views import dashboard
from .healthz import healthz, readyz


# ---------- 유틸성 뷰 ----------
def api_root_healthcheck(_request):
    """API 루트 상태 정보"""
    return JsonResponse({"status": "ok", "message": "Calorie tracker API root"})


urlpatterns = [
    # ---------- 헬스체크 ----------
    path("healthz/", healthz, name="healthz"),
    path("readyz/", readyz, name="readyz"),
    path("healthz", healthz),
    path("readyz", readyz),
    path("api/health/", api_root_healthcheck, name="api_root_healthcheck"),
    # ---------- Admin ----------
    path("admin/", admin.site.urls),
    # ---------- AUTH (로그인/토큰) ----------
    path("auth/login/", LoginView.as_view(), name="auth_login"),
    path("auth/token/refresh/", PublicTokenRefreshView.as_view(), name="token_refresh"),
    path("auth/token/verify/", PublicTokenVerifyView.as_view(), name="token_verify"),
    path(
        "auth/",
        include((users_urls.auth_urlpatterns, "users_auth"), namespace="users_auth"),
    ),
    # ---------- 대시보드 ----------
    path("api/dashboard/", dashboard, name="dashboard"),
    # ---------- API 라우트 ----------
    path(
        "api/",
        include((users_urls.api_urlpatterns, "users_api"), namespace="users_api"),
    ),
    path("api/", include("meals.urls")),
    path("api/", include("challenges.urls")),
    path("api/ai/", include("ai.urls")),
    # ---------- OpenAPI ----------
    path("openapi.json", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

# ---------- 개발용 미디어 ----------
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# ---------- Prometheus 계측 ----------
# PROM_ENABLED=True 일 때만 /metrics 활성화
if getattr(settings, "PROM_ENABLED", False):
    urlpatterns += [
        path("", include("django_prometheus.urls")),
    ]
