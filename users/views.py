# users/views.py
from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import decorators, generics, permissions, status, viewsets
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from meals.aggregation import refresh_goal_flags

from .serializers import RegisterSerializer, UserSerializer

User = get_user_model()


# ---------------------------
# 권한
# ---------------------------


class IsSelfOrAdmin(permissions.BasePermission):
    """
    오브젝트 권한:
    - 관리자는 누구나 접근 가능
    - 일반 유저는 자기 객체(== 요청자)만 접근 가능
    """

    def has_object_permission(self, request, view, obj):
        return bool(
            request.user and (request.user.is_staff or obj.id == request.user.id)
        )


def _save_user(serializer):
    """
    프로필 저장. 하루 목표 열량이 바뀌면 같은 트랜잭션에서
    기존 DailyStats 의 goal_achieved 도 다시 판정한다.
    """
    with transaction.atomic():
        before = serializer.instance.daily_calorie_goal
        user = serializer.save()
        if user.daily_calorie_goal != before:
            refresh_goal_flags(user)
    return user


# ---------------------------
# API: 사용자 뷰셋 (JWT 필요)
# ---------------------------


class UserViewSet(viewsets.ModelViewSet):
    """
    사용자 API (JWT 필요)
    - 목록/상세: 관리자만 전체, 일반 사용자는 자기 자신만 조회
    - 생성: 관리자만 허용(일반 회원가입은 RegisterView 사용)
    - 수정/삭제: 자기 자신만, 또는 관리자
    - 커스텀 액션: me
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, IsSelfOrAdmin]

    # 관리자는 전체, 일반 유저는 자기 자신만
    def get_queryset(self):
        user = self.request.user
        if user and user.is_staff:
            return User.objects.all().order_by("id")
        return User.objects.filter(id=user.id)

    def get_serializer_class(self):
        # 관리자 생성은 회원가입과 같은 검증(비밀번호 해시 포함)
        if self.action == "create":
            return RegisterSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):
        if not request.user.is_staff:
            return Response(
                {"detail": "관리자만 사용자 생성이 가능합니다."},
                status=status.HTTP_403_FORBIDDEN,
            )
        return super().create(request, *args, **kwargs)

    def perform_update(self, serializer):
        _save_user(serializer)

    # 삭제(탈퇴): Meal/MealItem/DailyStats 는 FK CASCADE 로 함께 정리된다
    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()

        if not request.user.is_staff:
            current_password = request.data.get("current_password")
            if not current_password or not request.user.check_password(
                current_password
            ):
                return Response(
                    {"detail": "현재 비밀번호가 올바르지 않습니다."},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        instance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    # GET/PATCH/DELETE /api/users/me/
    @decorators.action(detail=False, methods=["get", "patch", "delete"], url_path="me")
    def me(self, request):
        """
        GET    : 내 정보 조회
        PATCH  : 내 정보 일부 수정 (email, daily_calorie_goal)
        DELETE : 내 계정 삭제(탈퇴) - 비밀번호 확인 필요
        """
        user = request.user

        if request.method == "GET":
            return Response(self.get_serializer(user).data)

        if request.method == "PATCH":
            serializer = self.get_serializer(user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            _save_user(serializer)
            return Response(serializer.data)

        current_password = request.data.get("current_password")
        if not current_password or not user.check_password(current_password):
            return Response(
                {"detail": "현재 비밀번호가 올바르지 않습니다."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------
# API: 회원가입 (공개)
# ---------------------------


class RegisterView(generics.CreateAPIView):
    """
    회원가입 엔드포인트 (비로그인 허용)
    - URL:    POST /auth/register/
    - Body:   { "username": str, "email": str, "password": str, "daily_calorie_goal": int? }
    - Return: { "user": {...}, "access": "...", "refresh": "..." }
    """

    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "user": UserSerializer(user).data,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
            status=status.HTTP_201_CREATED,
        )
