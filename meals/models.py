from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

ZERO = Decimal("0")


class MealType(models.TextChoices):
    BREAKFAST = "breakfast", "아침"
    LUNCH = "lunch", "점심"
    DINNER = "dinner", "저녁"
    SNACK = "snack", "간식"


class Unit(models.TextChoices):
    GRAMS = "grams", "g"
    ML = "ml", "ml"
    PIECES = "pieces", "개"
    CUPS = "cups", "컵"
    TBSP = "tbsp", "큰술"
    TSP = "tsp", "작은술"


class ItemSource(models.TextChoices):
    OCR_DETECTED = "ocr_detected", "사진 인식"
    MANUAL_ENTRY = "manual_entry", "직접 입력"


class Meal(models.Model):
    # 하루의 한 끼
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="meals",
        verbose_name="사용자",
    )
    meal_name = models.CharField(max_length=255, verbose_name="식사 이름")
    meal_type = models.CharField(max_length=20, choices=MealType.choices, verbose_name="식사 유형")
    meal_date = models.DateField(verbose_name="식사 날짜")
    photo_url = models.CharField(max_length=500, null=True, blank=True, verbose_name="사진 URL")
    # 사진 인식 실패로 항목 없이 저장된 끼니 → 사용자가 직접 확인
    needs_review = models.BooleanField(default=False, verbose_name="검토 필요")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    def __str__(self):
        return f"{self.user_id} {self.meal_date} {self.meal_type}"

    @property
    def bucket(self):
        return (self.user_id, self.meal_date)

    class Meta:
        verbose_name = "식사"
        verbose_name_plural = "식사 목록"
        ordering = ["-meal_date", "-created_at"]
        indexes = [
            models.Index(fields=["user", "-meal_date"], name="meal_user_date_idx"),
        ]


class MealItem(models.Model):
    # 식사 안의 세부 항목 (집계의 원본 데이터)
    meal = models.ForeignKey(Meal, on_delete=models.CASCADE, related_name="items", verbose_name="식사")
    food_name = models.CharField(max_length=255, verbose_name="음식 이름")
    quantity = models.DecimalField(
        max_digits=8, decimal_places=2, default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.01"))],
        verbose_name="수량",
    )
    unit = models.CharField(max_length=20, choices=Unit.choices, default=Unit.PIECES, verbose_name="단위")
    calories = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(ZERO)], verbose_name="열량(kcal)"
    )
    protein = models.DecimalField(
        max_digits=8, decimal_places=2, default=ZERO, validators=[MinValueValidator(ZERO)], verbose_name="단백질(g)"
    )
    carbs = models.DecimalField(
        max_digits=8, decimal_places=2, default=ZERO, validators=[MinValueValidator(ZERO)], verbose_name="탄수화물(g)"
    )
    fat = models.DecimalField(
        max_digits=8, decimal_places=2, default=ZERO, validators=[MinValueValidator(ZERO)], verbose_name="지방(g)"
    )
    source = models.CharField(
        max_length=20, choices=ItemSource.choices, default=ItemSource.MANUAL_ENTRY, verbose_name="입력 출처"
    )
    confidence = models.DecimalField(
        max_digits=4, decimal_places=3, null=True, blank=True,
        validators=[MinValueValidator(ZERO), MaxValueValidator(Decimal("1"))],
        verbose_name="인식 신뢰도",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.food_name} - {self.calories}kcal"

    class Meta:
        verbose_name = "식사 항목"
        verbose_name_plural = "식사 항목 목록"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="mealitem_quantity_positive"),
            models.CheckConstraint(condition=models.Q(calories__gte=0), name="mealitem_calories_non_negative"),
            models.CheckConstraint(
                condition=models.Q(protein__gte=0, carbs__gte=0, fat__gte=0),
                name="mealitem_macros_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(confidence__isnull=True) | models.Q(confidence__gte=0, confidence__lte=1),
                name="mealitem_confidence_range",
            ),
        ]


class DailyStats(models.Model):
    """
    (사용자, 날짜) 하루 합계 캐시.
    MealItem 이 원본이고 이 테이블은 meals.aggregation 만 쓴다.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="daily_stats",
        verbose_name="사용자",
    )
    stats_date = models.DateField(verbose_name="날짜")
    total_calories = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO, verbose_name="총 열량(kcal)")
    meals_logged = models.PositiveIntegerField(default=0, verbose_name="기록한 끼니 수")
    goal_achieved = models.BooleanField(default=False, verbose_name="목표 달성")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    class Meta:
        verbose_name = "일일 통계"
        verbose_name_plural = "일일 통계 목록"
        ordering = ["-stats_date"]
        constraints = [
            models.UniqueConstraint(fields=["user", "stats_date"], name="uniq_daily_stats_user_date"),
            models.CheckConstraint(condition=models.Q(total_calories__gte=0), name="dailystats_total_non_negative"),
            models.CheckConstraint(condition=models.Q(meals_logged__gte=0), name="dailystats_meals_non_negative"),
        ]

    def __str__(self):
        return f"{self.user_id} {self.stats_date}"
