"""
meals/aggregation.py

MealItem 이 추가/수정/삭제될 때, 같은 유저/날짜(버킷)의 DailyStats 를
다시 집계해서 저장한다.

핵심 아이디어
- source of truth 는 MealItem
- DailyStats 는 '하루 합계 캐시' (이 모듈 밖에서는 쓰지 않음)
- 시그널 대신 meals.services 가 변경과 같은 트랜잭션 안에서 직접 호출
- 부모(Meal/User)가 이미 사라진 버킷은 조용히 건너뜀 (CASCADE 삭제 중 정상 상황)
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum

from .models import ZERO, DailyStats, Meal, MealItem

logger = logging.getLogger(__name__)

User = get_user_model()


def live_totals(user_id, meal_date):
    """버킷의 현재 MealItem/Meal 로부터 합계를 바로 계산 (저장 안 함)"""
    total = (
        MealItem.objects.filter(meal__user_id=user_id, meal__meal_date=meal_date)
        .aggregate(total=Sum("calories"))["total"]
    )
    meals_logged = Meal.objects.filter(user_id=user_id, meal_date=meal_date).count()
    return {"total_calories": total or ZERO, "meals_logged": meals_logged}


def recompute_daily_stats(user_id, meal_date):
    """
    (user_id, meal_date) 버킷의 DailyStats 를 다시 계산해서 upsert.

    - user_id/meal_date 를 알 수 없거나 사용자가 이미 삭제됐으면 None (에러 아님)
    - 사용자 row 를 SELECT ... FOR UPDATE 로 잡고 계산하므로
      같은 사용자의 동시 쓰기는 직렬화된다
    - 호출자 트랜잭션 안에서 실패하면 변경 전체가 롤백된다
    """
    if user_id is None or meal_date is None:
        logger.debug("recompute skipped: unresolved bucket (%s, %s)", user_id, meal_date)
        return None

    with transaction.atomic():
        goal = (
            User.objects.select_for_update()
            .filter(pk=user_id)
            .values_list("daily_calorie_goal", flat=True)
            .first()
        )
        if goal is None:
            logger.debug("recompute skipped: user %s no longer exists", user_id)
            return None

        totals = live_totals(user_id, meal_date)
        stats, _ = DailyStats.objects.update_or_create(
            user_id=user_id,
            stats_date=meal_date,
            defaults={
                "total_calories": totals["total_calories"],
                "meals_logged": totals["meals_logged"],
                "goal_achieved": totals["total_calories"] <= goal,
            },
        )
    return stats


def recompute_buckets(buckets):
    """
    여러 버킷을 한 번씩만 재계산. 정렬 순서로 잠가서 교착을 피한다.
    None 이 섞인 버킷은 recompute_daily_stats 에서 건너뛴다.
    """
    unique = {b for b in buckets if b is not None}
    ordered = sorted(unique, key=lambda b: (b[0] is None, b[0] or 0, str(b[1])))
    return [recompute_daily_stats(user_id, meal_date) for user_id, meal_date in ordered]


@transaction.atomic
def refresh_goal_flags(user):
    """하루 목표 열량이 바뀐 뒤 기존 DailyStats 의 goal_achieved 만 다시 판정"""
    goal = user.daily_calorie_goal
    qs = DailyStats.objects.filter(user=user)
    achieved = qs.filter(total_calories__lte=goal).update(goal_achieved=True)
    missed = qs.filter(total_calories__gt=goal).update(goal_achieved=False)
    return achieved + missed


def rebuild_all(user=None):
    """
    모든 버킷 전체 재집계 (관리 명령/복구용).
    Meal 이 남아 있는 버킷 + 이미 DailyStats 가 있는 버킷 모두 대상.
    """
    meals = Meal.objects.all()
    stats = DailyStats.objects.all()
    if user is not None:
        meals = meals.filter(user=user)
        stats = stats.filter(user=user)

    buckets = set(meals.values_list("user_id", "meal_date").distinct())
    buckets.update(stats.values_list("user_id", "stats_date"))
    return len([s for s in recompute_buckets(buckets) if s is not None])
