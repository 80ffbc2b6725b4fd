from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models


def default_daily_calorie_goal():
    return settings.DEFAULT_DAILY_CALORIE_GOAL


class CustomUser(AbstractUser):
    """사용자 모델 - id, 아이디, 비밀번호, 이메일, 하루 목표 열량"""
    # password는 AbstractUser에서 제공 (자동 해시)

    username = models.CharField(
        max_length=50,
        unique=True,
        verbose_name="아이디",
        help_text="로그인 화면에 표시될 아이디 (영문, 숫자 조합)"
    )
    email = models.EmailField(
        max_length=255,
        unique=True,
        verbose_name="이메일",
        help_text="로그인에 사용하는 이메일 주소"
    )
    daily_calorie_goal = models.PositiveIntegerField(
        default=default_daily_calorie_goal,
        validators=[MinValueValidator(1)],
        verbose_name="하루 목표 열량(kcal)",
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="가입일")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['email']  # 슈퍼유저 생성시 필수 입력

    def save(self, *args, **kwargs):
        # 이메일은 항상 소문자/공백제거 상태로 저장 (로그인 조회 기준)
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.username

    class Meta:
        verbose_name = "사용자"
        verbose_name_plural = "사용자 목록"
        constraints = [
            models.CheckConstraint(condition=models.Q(daily_calorie_goal__gt=0), name="user_daily_goal_positive"),
        ]
