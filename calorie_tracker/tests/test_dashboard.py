from datetime import date

import pytest
from django.urls import reverse
from django.utils import timezone

from meals import services


@pytest.mark.django_db
def test_dashboard_empty_day_reads_as_zero(auth_client, user):
    r = auth_client.get(reverse("dashboard"), {"date": "2025-03-14"})
    assert r.status_code == 200
    body = r.json()
    assert body == {
        "date": "2025-03-14",
        "daily_goal": 2000,
        "total_calories": 0,
        "remaining_calories": 2000,
        "progress_percent": 0.0,
        "goal_achieved": True,
        "meals_logged": 0,
        "meals": [],
    }


@pytest.mark.django_db
def test_dashboard_uses_daily_stats(auth_client, user):
    day = date(2025, 3, 14)
    services.create_meal(
        user, meal_type="breakfast", meal_date=day, meal_name="b",
        items=[{"food_name": "Oatmeal", "calories": 300}, {"food_name": "Banana", "calories": 105}],
    )
    services.create_meal(
        user, meal_type="lunch", meal_date=day, meal_name="l",
        items=[{"food_name": "Chicken", "calories": 248}, {"food_name": "Rice", "calories": 112}],
    )

    body = auth_client.get(reverse("dashboard"), {"date": "2025-03-14"}).json()
    assert body["total_calories"] == 765
    assert body["remaining_calories"] == 1235
    assert body["progress_percent"] == 38.25
    assert body["goal_achieved"] is True
    assert body["meals_logged"] == 2
    assert [m["meal_type"] for m in body["meals"]] == ["breakfast", "lunch"]
    assert body["meals"][0]["calories"] == 405
    assert body["meals"][1]["foods"] == [
        {"food_name": "Chicken", "calories": 248},
        {"food_name": "Rice", "calories": 112},
    ]


@pytest.mark.django_db
def test_dashboard_over_goal(auth_client, user):
    today = timezone.localdate()
    services.create_meal(
        user, meal_type="dinner", meal_date=today, meal_name="feast",
        items=[{"food_name": "Pizza", "calories": 2400.5}],
    )
    body = auth_client.get(reverse("dashboard")).json()
    assert body["date"] == today.isoformat()
    assert body["total_calories"] == 2400.5
    assert body["remaining_calories"] == -400.5
    assert body["progress_percent"] == 120.03
    assert body["goal_achieved"] is False


@pytest.mark.django_db
def test_dashboard_bad_date(auth_client):
    r = auth_client.get(reverse("dashboard"), {"date": "14-03-2025"})
    assert r.status_code == 400


@pytest.mark.django_db
def test_dashboard_requires_auth(api_client):
    assert api_client.get(reverse("dashboard")).status_code == 401


@pytest.mark.django_db
def test_healthz_and_readyz(api_client):
    assert api_client.get(reverse("healthz")).status_code == 200
    assert api_client.get(reverse("readyz")).status_code == 200
