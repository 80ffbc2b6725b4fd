# meals/services.py
"""
Meal / MealItem 쓰기 작업 모음 (unit of work).

모든 함수는 하나의 트랜잭션 안에서 변경을 저장한 뒤
meals.aggregation 으로 해당 버킷의 DailyStats 를 다시 계산한다.
집계가 실패하면 변경도 함께 롤백된다.
"""
import logging
from decimal import Decimal

from django.db import transaction

from .aggregation import recompute_buckets, recompute_daily_stats
from .models import Meal, MealItem

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
THREE_PLACES = Decimal("0.001")

MEAL_FIELDS = ("meal_name", "meal_type", "meal_date", "photo_url", "needs_review", "user")
ITEM_FIELDS = (
    "food_name", "quantity", "unit", "calories", "protein", "carbs", "fat", "source", "confidence",
)


def to_decimal(value, places=TWO_PLACES):
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(places)


def _clean_item_fields(fields):
    unknown = set(fields) - set(ITEM_FIELDS)
    if unknown:
        raise TypeError(f"unknown meal item fields: {sorted(unknown)}")
    data = dict(fields)
    for name in ("quantity", "calories", "protein", "carbs", "fat"):
        if name in data:
            data[name] = to_decimal(data[name])
    if "confidence" in data:
        data["confidence"] = to_decimal(data["confidence"], THREE_PLACES)
    return data


@transaction.atomic
def create_meal(user, *, meal_type, meal_date, meal_name, photo_url=None, needs_review=False, items=()):
    """끼니 + 항목들을 한 번에 저장하고 버킷을 한 번 재계산"""
    meal = Meal.objects.create(
        user=user,
        meal_type=meal_type,
        meal_date=meal_date,
        meal_name=meal_name,
        photo_url=photo_url,
        needs_review=needs_review,
    )
    for fields in items:
        MealItem.objects.create(meal=meal, **_clean_item_fields(fields))
    recompute_daily_stats(meal.user_id, meal.meal_date)
    logger.info("meal %s created for user %s (%d items)", meal.pk, user.pk, len(items))
    return meal


@transaction.atomic
def update_meal(meal, **changes):
    unknown = set(changes) - set(MEAL_FIELDS)
    if unknown:
        raise TypeError(f"unknown meal fields: {sorted(unknown)}")

    old_bucket = meal.bucket
    for name, value in changes.items():
        setattr(meal, name, value)
    meal.save()
    recompute_buckets([old_bucket, meal.bucket])
    return meal


@transaction.atomic
def delete_meal(meal):
    # CASCADE 로 항목도 함께 삭제 → 삭제 전 버킷 기준으로 재계산
    bucket = meal.bucket
    meal.delete()
    recompute_daily_stats(*bucket)


@transaction.atomic
def add_meal_item(meal, **fields):
    item = MealItem.objects.create(meal=meal, **_clean_item_fields(fields))
    recompute_daily_stats(meal.user_id, meal.meal_date)
    return item


@transaction.atomic
def update_meal_item(item, **changes):
    """항목 수정. 다른 끼니로 옮기면 이전/새 버킷 모두 재계산"""
    old_bucket = item.meal.bucket
    new_meal = changes.pop("meal", None)
    if new_meal is not None:
        item.meal = new_meal
    for name, value in _clean_item_fields(changes).items():
        setattr(item, name, value)
    item.save()
    recompute_buckets([old_bucket, item.meal.bucket])
    return item


@transaction.atomic
def delete_meal_item(item):
    # 삭제 전 부모 끼니의 버킷 (부모가 이미 없으면 None → 건너뜀)
    bucket = Meal.objects.filter(pk=item.meal_id).values_list("user_id", "meal_date").first()
    item_id = item.pk
    item.delete()
    if bucket is None:
        logger.debug("meal item %s deleted without a parent meal", item_id)
        return
    recompute_daily_stats(*bucket)
