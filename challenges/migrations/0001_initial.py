from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_name", models.CharField(max_length=255, verbose_name="이벤트 이름")),
                ("event_start_date", models.DateField(verbose_name="시작일")),
                ("event_end_date", models.DateField(verbose_name="종료일")),
                ("event_type", models.CharField(max_length=50, verbose_name="이벤트 유형")),
                (
                    "daily_target",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="하루 목표 열량(kcal)",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일")),
            ],
            options={
                "verbose_name": "이벤트",
                "verbose_name_plural": "이벤트 목록",
                "ordering": ["-event_start_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="EventParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("joined_date", models.DateField(default=django.utils.timezone.localdate, verbose_name="참여일")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="challenges.event",
                        verbose_name="이벤트",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="event_participations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="사용자",
                    ),
                ),
            ],
            options={
                "verbose_name": "이벤트 참여자",
                "verbose_name_plural": "이벤트 참여자 목록",
                "ordering": ["joined_date", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "user"), name="uniq_event_participant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeaderboardEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("challenge_date", models.DateField(verbose_name="날짜")),
                (
                    "total_calories",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10, verbose_name="총 열량(kcal)"),
                ),
                ("rank", models.PositiveIntegerField(blank=True, null=True, verbose_name="순위")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="leaderboard_entries",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="사용자",
                    ),
                ),
            ],
            options={
                "verbose_name": "리더보드",
                "verbose_name_plural": "리더보드 목록",
                "ordering": ["challenge_date", "rank", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "challenge_date"), name="uniq_leaderboard_user_date"),
                ],
            },
        ),
    ]
