from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Meal",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("meal_name", models.CharField(max_length=255, verbose_name="식사 이름")),
                (
                    "meal_type",
                    models.CharField(
                        choices=[("breakfast", "아침"), ("lunch", "점심"), ("dinner", "저녁"), ("snack", "간식")],
                        max_length=20,
                        verbose_name="식사 유형",
                    ),
                ),
                ("meal_date", models.DateField(verbose_name="식사 날짜")),
                ("photo_url", models.CharField(blank=True, max_length=500, null=True, verbose_name="사진 URL")),
                ("needs_review", models.BooleanField(default=False, verbose_name="검토 필요")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meals",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="사용자",
                    ),
                ),
            ],
            options={
                "verbose_name": "식사",
                "verbose_name_plural": "식사 목록",
                "ordering": ["-meal_date", "-created_at"],
                "indexes": [models.Index(fields=["user", "-meal_date"], name="meal_user_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="MealItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("food_name", models.CharField(max_length=255, verbose_name="음식 이름")),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("1"),
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                        verbose_name="수량",
                    ),
                ),
                (
                    "unit",
                    models.CharField(
                        choices=[
                            ("grams", "g"),
                            ("ml", "ml"),
                            ("pieces", "개"),
                            ("cups", "컵"),
                            ("tbsp", "큰술"),
                            ("tsp", "작은술"),
                        ],
                        default="pieces",
                        max_length=20,
                        verbose_name="단위",
                    ),
                ),
                (
                    "calories",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="열량(kcal)",
                    ),
                ),
                (
                    "protein",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="단백질(g)",
                    ),
                ),
                (
                    "carbs",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="탄수화물(g)",
                    ),
                ),
                (
                    "fat",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="지방(g)",
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[("ocr_detected", "사진 인식"), ("manual_entry", "직접 입력")],
                        default="manual_entry",
                        max_length=20,
                        verbose_name="입력 출처",
                    ),
                ),
                (
                    "confidence",
                    models.DecimalField(
                        blank=True,
                        decimal_places=3,
                        max_digits=4,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                        verbose_name="인식 신뢰도",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "meal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="meals.meal",
                        verbose_name="식사",
                    ),
                ),
            ],
            options={
                "verbose_name": "식사 항목",
                "verbose_name_plural": "식사 항목 목록",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="DailyStats",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stats_date", models.DateField(verbose_name="날짜")),
                (
                    "total_calories",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10, verbose_name="총 열량(kcal)"),
                ),
                ("meals_logged", models.PositiveIntegerField(default=0, verbose_name="기록한 끼니 수")),
                ("goal_achieved", models.BooleanField(default=False, verbose_name="목표 달성")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_stats",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="사용자",
                    ),
                ),
            ],
            options={
                "verbose_name": "일일 통계",
                "verbose_name_plural": "일일 통계 목록",
                "ordering": ["-stats_date"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "stats_date"), name="uniq_daily_stats_user_date"),
                ],
            },
        ),
    ]
