# meals/serializers.py
from datetime import date as _date, timedelta
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from rest_framework import serializers

from .models import DailyStats, Meal, MealItem, MealType

HISTORY_DEFAULT_DAYS = 7


# ---------------------------
# 공통: Decimal → float 강제 직렬화 믹스인
# - DRF 기본 동작(Decimal → 문자열) 대신 숫자로 응답
# - Meta.numeric_fields 에 명시된 필드만 변환
# ---------------------------
class NumericCoerceSerializer(serializers.ModelSerializer):
    def _coerce_number(self, val):
        if val is None:
            return None
        if isinstance(val, Decimal):
            return float(val)
        if isinstance(val, str):
            try:
                return float(Decimal(val))
            except (InvalidOperation, ValueError):
                return val
        return val

    def to_representation(self, instance):
        data = super().to_representation(instance)
        for f in getattr(self.Meta, "numeric_fields", ()):
            if f in data:
                data[f] = self._coerce_number(data[f])
        return data


# ---------------------------
# MealItem
# - meal 은 쓰기 시 필수(본인 끼니인지 뷰에서 검증)
# - 저장은 meals.services 를 통해서만 (DailyStats 재계산)
# ---------------------------
class MealItemSerializer(NumericCoerceSerializer):
    class Meta:
        model = MealItem
        fields = [
            "id",
            "meal",
            "food_name",
            "quantity",
            "unit",
            "calories",
            "protein",
            "carbs",
            "fat",
            "source",
            "confidence",
            "created_at",
        ]
        read_only_fields = ["created_at"]
        numeric_fields = ["quantity", "calories", "protein", "carbs", "fat", "confidence"]

    def validate_food_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("음식 이름을 입력해주세요.")
        return value


class NestedMealItemSerializer(MealItemSerializer):
    class Meta(MealItemSerializer.Meta):
        fields = [f for f in MealItemSerializer.Meta.fields if f != "meal"]


# ---------------------------
# Meal (끼니)
# - items: 읽기 시 중첩, 생성 시 함께 입력 가능
# - user 는 뷰에서 request.user 로 주입
# ---------------------------
class MealSerializer(serializers.ModelSerializer):
    items = NestedMealItemSerializer(many=True, required=False)
    total_calories = serializers.SerializerMethodField()

    class Meta:
        model = Meal
        fields = [
            "id",
            "user",
            "meal_name",
            "meal_type",
            "meal_date",
            "photo_url",
            "needs_review",
            "items",
            "total_calories",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["user", "created_at", "updated_at"]

    def get_total_calories(self, obj):
        return float(sum((item.calories for item in obj.items.all()), Decimal("0")))

    def validate_items(self, value):
        if self.instance is not None and value:
            raise serializers.ValidationError("항목 수정은 /api/mealitems/ 를 사용해주세요.")
        return value


# ---------------------------
# DailyStats (하루 합계 캐시, 읽기 전용)
# ---------------------------
class DailyStatsSerializer(NumericCoerceSerializer):
    class Meta:
        model = DailyStats
        fields = [
            "id",
            "user",
            "stats_date",
            "total_calories",
            "meals_logged",
            "goal_achieved",
            "updated_at",
        ]
        read_only_fields = fields
        numeric_fields = ["total_calories"]


# ---------------------------
# 사진 업로드 / 기록 조회 입력
# ---------------------------
class MealUploadSerializer(serializers.Serializer):
    file = serializers.FileField(
        error_messages={"required": "No file uploaded", "empty": "No file uploaded"}
    )
    meal_type = serializers.ChoiceField(
        choices=MealType.choices,
        error_messages={"invalid_choice": "Invalid meal_type. Must be one of: breakfast, lunch, dinner, snack"},
    )
    meal_date = serializers.DateField(
        input_formats=["%Y-%m-%d"],
        error_messages={"required": "meal_date is required (YYYY-MM-DD format)"},
    )

    def validate_meal_date(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError("meal_date must be today or in the past")
        return value


class DateRangeQuerySerializer(serializers.Serializer):
    startDate = serializers.DateField(
        required=False, input_formats=["%Y-%m-%d"],
        error_messages={"invalid": "Invalid date format. Use YYYY-MM-DD"},
    )
    endDate = serializers.DateField(
        required=False, input_formats=["%Y-%m-%d"],
        error_messages={"invalid": "Invalid date format. Use YYYY-MM-DD"},
    )

    def validate(self, attrs):
        # 기본값: endDate 는 오늘, startDate 는 endDate 7일 전
        end = attrs.get("endDate") or timezone.localdate()
        start = attrs.get("startDate") or end - timedelta(days=HISTORY_DEFAULT_DAYS)
        if start > end:
            raise serializers.ValidationError("startDate 는 endDate 보다 이후일 수 없습니다.")
        attrs["startDate"], attrs["endDate"] = start, end
        return attrs


def parse_date_param(value, field="date"):
    """쿼리스트링 YYYY-MM-DD → date (잘못된 형식이면 ValidationError)"""
    try:
        return _date.fromisoformat(value)
    except (TypeError, ValueError):
        raise serializers.ValidationError({field: "Invalid date format. Use YYYY-MM-DD"})
