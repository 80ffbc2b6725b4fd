from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.db import IntegrityError

from meals import aggregation, services
from meals.aggregation import live_totals, rebuild_all, recompute_daily_stats, refresh_goal_flags
from meals.models import DailyStats, Meal, MealItem

User = get_user_model()

D = date(2025, 3, 14)


def _stats(user, day=D):
    return DailyStats.objects.get(user=user, stats_date=day)


def _item(calories, name="food"):
    return {"food_name": name, "calories": calories}


@pytest.mark.django_db
def test_recompute_is_idempotent(user):
    services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(300), _item(105)])
    first = recompute_daily_stats(user.id, D)
    second = recompute_daily_stats(user.id, D)
    assert first.pk == second.pk
    assert (second.total_calories, second.meals_logged, second.goal_achieved) == (Decimal("405"), 1, True)
    assert DailyStats.objects.filter(user=user, stats_date=D).count() == 1


@pytest.mark.django_db
def test_adding_item_adds_its_calories(user):
    meal = services.create_meal(user, meal_type="dinner", meal_date=D, meal_name="x", items=[_item(500)])
    before = _stats(user).total_calories
    services.add_meal_item(meal, food_name="cake", calories="250.50")
    assert _stats(user).total_calories == before + Decimal("250.50")


@pytest.mark.django_db
def test_deleting_meal_removes_its_calories_and_keeps_row(user):
    breakfast = services.create_meal(user, meal_type="breakfast", meal_date=D, meal_name="b", items=[_item(300)])
    lunch = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="l", items=[_item(400)])

    services.delete_meal(lunch)
    stats = _stats(user)
    assert stats.total_calories == Decimal("300")
    assert stats.meals_logged == 1

    item = breakfast.items.get()
    services.delete_meal_item(item)
    stats = _stats(user)
    assert stats.total_calories == Decimal("0")
    assert stats.meals_logged == 1

    services.delete_meal(breakfast)
    stats = _stats(user)
    assert stats.total_calories == Decimal("0")
    assert stats.meals_logged == 0


@pytest.mark.django_db
@pytest.mark.parametrize("calories,achieved", [(2000, True), (2001, False), (1999, True)])
def test_goal_boundary(user, calories, achieved):
    services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(calories)])
    assert _stats(user).goal_achieved is achieved


@pytest.mark.django_db
def test_deleting_user_leaves_no_stats(user):
    services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(100)])
    user_id = user.id
    user.delete()
    assert not DailyStats.objects.filter(user_id=user_id).exists()
    assert not MealItem.objects.filter(meal__user_id=user_id).exists()


@pytest.mark.django_db
def test_recompute_for_missing_user_is_noop():
    assert recompute_daily_stats(999999, D) is None
    assert recompute_daily_stats(None, D) is None
    assert not DailyStats.objects.exists()


@pytest.mark.django_db
def test_breakfast_lunch_scenario(user):
    services.create_meal(
        user, meal_type="breakfast", meal_date=D, meal_name="b",
        items=[_item(300, "Oatmeal"), _item(105, "Banana")],
    )
    lunch = services.create_meal(
        user, meal_type="lunch", meal_date=D, meal_name="l",
        items=[_item(248, "Chicken"), _item(112, "Rice")],
    )
    stats = _stats(user)
    assert (stats.total_calories, stats.meals_logged, stats.goal_achieved) == (Decimal("765"), 2, True)

    for item in list(lunch.items.all()):
        services.delete_meal_item(item)
    stats = _stats(user)
    assert stats.total_calories == Decimal("405")
    assert stats.meals_logged == 2


@pytest.mark.django_db
def test_moving_meal_recomputes_both_days(user):
    other_day = date(2025, 3, 15)
    meal = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(700)])
    services.update_meal(meal, meal_date=other_day)

    old = _stats(user, D)
    new = _stats(user, other_day)
    assert (old.total_calories, old.meals_logged) == (Decimal("0"), 0)
    assert (new.total_calories, new.meals_logged) == (Decimal("700"), 1)


@pytest.mark.django_db
def test_moving_item_between_users_meals(user, other_user):
    mine = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(700)])
    theirs = services.create_meal(other_user, meal_type="lunch", meal_date=D, meal_name="y")
    services.update_meal_item(mine.items.get(), meal=theirs, calories=650)

    assert _stats(user).total_calories == Decimal("0")
    assert _stats(other_user).total_calories == Decimal("650")


@pytest.mark.django_db
def test_empty_meal_creates_stats_row(user):
    services.create_meal(user, meal_type="snack", meal_date=D, meal_name="Unknown Meal", needs_review=True)
    stats = _stats(user)
    assert (stats.total_calories, stats.meals_logged, stats.goal_achieved) == (Decimal("0"), 1, True)


@pytest.mark.django_db
def test_no_stats_for_day_without_meals(user):
    services.create_meal(user, meal_type="snack", meal_date=D, meal_name="x", items=[_item(50)])
    assert not DailyStats.objects.filter(user=user, stats_date=date(2025, 3, 13)).exists()


@pytest.mark.django_db
def test_failed_recompute_rolls_back_mutation(user, monkeypatch):
    meal = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(100)])

    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(services, "recompute_daily_stats", boom)
    with pytest.raises(RuntimeError):
        services.add_meal_item(meal, food_name="cake", calories=500)

    assert meal.items.count() == 1
    assert _stats(user).total_calories == Decimal("100")


@pytest.mark.django_db
def test_goal_change_rederives_flags(user):
    services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(1800)])
    assert _stats(user).goal_achieved is True

    user.daily_calorie_goal = 1500
    user.save()
    refresh_goal_flags(user)
    assert _stats(user).goal_achieved is False


@pytest.mark.django_db
def test_float_values_are_normalized(user):
    meal = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x")
    item = services.add_meal_item(meal, food_name="rice", calories=112.4, confidence=0.85)
    item.refresh_from_db()
    assert item.calories == Decimal("112.40")
    assert item.confidence == Decimal("0.850")


@pytest.mark.django_db
def test_rebuild_all_repairs_drifted_rows(user):
    services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(640)])
    DailyStats.objects.filter(user=user).update(total_calories=1, meals_logged=9, goal_achieved=False)

    assert rebuild_all() == 1
    stats = _stats(user)
    assert stats.total_calories == Decimal("640")
    assert stats.meals_logged == 1
    assert stats.goal_achieved is True
    assert live_totals(user.id, D) == {"total_calories": Decimal("640"), "meals_logged": 1}


@pytest.mark.django_db
def test_recompute_buckets_skips_duplicates(user, monkeypatch):
    calls = []
    original = aggregation.recompute_daily_stats

    def spy(user_id, meal_date):
        calls.append((user_id, meal_date))
        return original(user_id, meal_date)

    monkeypatch.setattr(aggregation, "recompute_daily_stats", spy)
    Meal.objects.create(user=user, meal_type="lunch", meal_date=D, meal_name="x")
    aggregation.recompute_buckets([(user.id, D), (user.id, D), None])
    assert calls == [(user.id, D)]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "fields",
    [
        {"calories": -1},
        {"calories": 10, "quantity": 0},
        {"calories": 10, "protein": -5},
        {"calories": 10, "confidence": 7},
    ],
)
def test_out_of_range_item_is_rejected_by_db(user, fields):
    meal = services.create_meal(user, meal_type="lunch", meal_date=D, meal_name="x", items=[_item(100)])
    with pytest.raises(IntegrityError):
        services.add_meal_item(meal, food_name="bad", **fields)

    assert meal.items.count() == 1
    stats = _stats(user)
    assert (stats.total_calories, stats.meals_logged) == (Decimal("100"), 1)


@pytest.mark.django_db
def test_non_positive_goal_is_rejected_by_db(user):
    with pytest.raises(IntegrityError):
        User.objects.filter(pk=user.pk).update(daily_calorie_goal=0)
