from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from meals.models import ZERO, DailyStats, Meal
from meals.serializers import parse_date_param


def _num(value):
    # 정수로 떨어지면 int, 아니면 float
    value = Decimal(value)
    return int(value) if value == value.to_integral_value() else float(value)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """
    GET /api/dashboard/?date=YYYY-MM-DD (기본: 오늘)
    합계/목표 달성 여부는 DailyStats 에서 읽는다. 기록이 없으면 0.
    """
    user = request.user
    value = request.query_params.get("date")
    target = parse_date_param(value) if value else timezone.localdate()

    goal = user.daily_calorie_goal
    stats = DailyStats.objects.filter(user=user, stats_date=target).first()
    total = stats.total_calories if stats else ZERO
    meals_logged = stats.meals_logged if stats else 0
    goal_achieved = stats.goal_achieved if stats else total <= goal

    progress = ZERO
    if goal > 0:
        progress = (total / goal * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    meals = []
    qs = Meal.objects.filter(user=user, meal_date=target).prefetch_related("items").order_by("created_at")
    for meal in qs:
        foods = [
            {"food_name": item.food_name, "calories": int(round(item.calories))}
            for item in meal.items.all()
        ]
        meals.append({
            "id": meal.id,
            "meal_type": meal.meal_type,
            "meal_name": meal.meal_name,
            "photo_url": meal.photo_url,
            "needs_review": meal.needs_review,
            "foods": foods,
            "calories": sum(f["calories"] for f in foods),
        })

    return Response({
        "date": target.isoformat(),
        "daily_goal": goal,
        "total_calories": _num(total),
        "remaining_calories": _num(goal - total),
        "progress_percent": float(progress),
        "goal_achieved": goal_achieved,
        "meals_logged": meals_logged,
        "meals": meals,
    })
