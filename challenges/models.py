from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Event(models.Model):
    """기간 챌린지 (예: 2주 동안 하루 1800kcal 이하)"""
    event_name = models.CharField(max_length=255, verbose_name="이벤트 이름")
    event_start_date = models.DateField(verbose_name="시작일")
    event_end_date = models.DateField(verbose_name="종료일")
    event_type = models.CharField(max_length=50, verbose_name="이벤트 유형")
    daily_target = models.PositiveIntegerField(validators=[MinValueValidator(1)], verbose_name="하루 목표 열량(kcal)")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    def __str__(self) -> str:
        return f"{self.event_name} ({self.event_start_date} ~ {self.event_end_date})"

    def clean(self):
        if self.event_start_date and self.event_end_date and self.event_end_date < self.event_start_date:
            raise ValidationError({"event_end_date": "종료일은 시작일보다 빠를 수 없습니다."})

    def is_active(self, on=None) -> bool:
        on = on or timezone.localdate()
        return self.event_start_date <= on <= self.event_end_date

    class Meta:
        verbose_name = "이벤트"
        verbose_name_plural = "이벤트 목록"
        ordering = ["-event_start_date", "-id"]


class EventParticipant(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="participants", verbose_name="이벤트")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="event_participations",
        verbose_name="사용자",
    )
    joined_date = models.DateField(default=timezone.localdate, verbose_name="참여일")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id}"

    class Meta:
        verbose_name = "이벤트 참여자"
        verbose_name_plural = "이벤트 참여자 목록"
        ordering = ["joined_date", "id"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="uniq_event_participant"),
        ]


class LeaderboardEntry(models.Model):
    """
    하루 단위 칼로리 챌린지 순위 (DailyStats 로부터 다시 계산되는 캐시).
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="leaderboard_entries",
        verbose_name="사용자",
    )
    challenge_date = models.DateField(verbose_name="날짜")
    total_calories = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"), verbose_name="총 열량(kcal)")
    rank = models.PositiveIntegerField(null=True, blank=True, verbose_name="순위")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.challenge_date} #{self.rank} {self.user_id}"

    class Meta:
        verbose_name = "리더보드"
        verbose_name_plural = "리더보드 목록"
        ordering = ["challenge_date", "rank", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "challenge_date"], name="uniq_leaderboard_user_date"),
        ]
