# calorie_tracker/auth_views.py
import re

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import (
    TokenRefreshView,
    TokenVerifyView,
)

from users.serializers import LoginSerializer

_PERIODS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_PERIOD_RE = re.compile(r"^(\d*)([smhd])")


class LoginRateThrottle(SimpleRateThrottle):
    """
    로그인 시도 제한. IP가 아니라 요청 body의 email 기준으로 센다.
    rate는 "10/15m" 처럼 기간 앞에 배수를 붙일 수 있다.
    """

    scope = "login"

    def get_cache_key(self, request, view):
        email = str(request.data.get("email") or "unknown").strip().lower()
        return self.cache_format % {"scope": self.scope, "ident": email}

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split("/")
        m = _PERIOD_RE.match(period.strip())
        if not m:
            raise ValueError(f"잘못된 throttle rate 형식: {rate!r}")
        multiplier = int(m.group(1) or 1)
        return (int(num), multiplier * _PERIODS[m.group(2)])


class LoginView(APIView):
    """
    이메일 + 비밀번호 로그인
    - URL:    POST /auth/login/
    - Body:   { "email": str, "password": str }
    - Return: { "userId", "username", "daily_calorie_goal", "token", "access", "refresh" }
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        refresh = RefreshToken.for_user(user)
        access = str(refresh.access_token)
        return Response(
            {
                "userId": user.id,
                "username": user.username,
                "daily_calorie_goal": user.daily_calorie_goal,
                "token": access,
                "access": access,
                "refresh": str(refresh),
            },
            status=status.HTTP_200_OK,
        )


# ✅ authentication_classes = [] 로 세션/CSRF 체인 비활성화
class PublicTokenRefreshView(TokenRefreshView):
    permission_classes = [AllowAny]
    authentication_classes = []


class PublicTokenVerifyView(TokenVerifyView):
    permission_classes = [AllowAny]
    authentication_classes = []
