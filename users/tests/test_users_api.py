from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from meals import services
from meals.models import DailyStats

User = get_user_model()


@pytest.mark.django_db
def test_register_returns_tokens(api_client):
    r = api_client.post(
        reverse("users_auth:auth_register"),
        {"username": "newbie", "email": "New@Example.com", "password": "Str0ng-pass!", "daily_calorie_goal": 1800},
        format="json",
    )
    assert r.status_code == 201, r.content
    body = r.json()
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["daily_calorie_goal"] == 1800
    assert "access" in body and "refresh" in body


@pytest.mark.django_db
def test_register_rejects_duplicates(api_client, user):
    r = api_client.post(
        reverse("users_auth:auth_register"),
        {"username": "alice", "email": "A@a.com", "password": "Str0ng-pass!"},
        format="json",
    )
    assert r.status_code == 400
    message = r.json()["error"]["message"]
    assert "username" in message and "email" in message


@pytest.mark.django_db
def test_login_by_email(api_client, user):
    r = api_client.post(reverse("auth_login"), {"email": "  A@A.com ", "password": "pw1234!"}, format="json")
    assert r.status_code == 200
    body = r.json()
    assert body["userId"] == user.id
    assert body["username"] == "alice"
    assert body["daily_calorie_goal"] == 2000
    assert body["token"] == body["access"]


@pytest.mark.django_db
def test_login_errors(api_client, user):
    url = reverse("auth_login")
    assert api_client.post(url, {"email": "not-an-email", "password": "x"}, format="json").status_code == 400
    r = api_client.post(url, {"email": "a@a.com", "password": "wrong"}, format="json")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "unauthorized"
    assert api_client.post(url, {"email": "nobody@a.com", "password": "pw1234!"}, format="json").status_code == 401


@pytest.mark.django_db
def test_login_is_throttled_per_email(api_client, user):
    url = reverse("auth_login")
    for _ in range(10):
        api_client.post(url, {"email": "a@a.com", "password": "wrong"}, format="json")
    r = api_client.post(url, {"email": "a@a.com", "password": "pw1234!"}, format="json")
    assert r.status_code == 429
    assert r.json()["error"]["code"] == "throttled"

    # 다른 이메일은 영향 없음
    r = api_client.post(url, {"email": "b@b.com", "password": "wrong"}, format="json")
    assert r.status_code == 401


@pytest.mark.django_db
def test_token_refresh_and_verify(api_client, token_pair):
    r = api_client.post(reverse("token_refresh"), {"refresh": token_pair["refresh"]}, format="json")
    assert r.status_code == 200
    assert "access" in r.json()
    r = api_client.post(reverse("token_verify"), {"token": token_pair["access"]}, format="json")
    assert r.status_code == 200


@pytest.mark.django_db
def test_users_list_requires_auth(api_client):
    r = api_client.get(reverse("users_api:users-list"))
    assert r.status_code == 401


@pytest.mark.django_db
def test_users_list_shows_only_self(auth_client, bakery, user):
    bakery.make(User, _quantity=3)
    r = auth_client.get(reverse("users_api:users-list"))
    assert r.status_code == 200
    data = r.json()
    rows = data["results"] if isinstance(data, dict) else data
    assert [row["id"] for row in rows] == [user.id]


@pytest.mark.django_db
def test_me_get_and_patch(auth_client, user):
    r = auth_client.get(reverse("users_api:users-me"))
    assert r.status_code == 200
    assert r.json()["username"] == "alice"

    r = auth_client.patch(reverse("users_api:users-me"), {"daily_calorie_goal": 0}, format="json")
    assert r.status_code == 400


@pytest.mark.django_db
def test_goal_change_rederives_existing_days(auth_client, user):
    day = date(2025, 3, 14)
    services.create_meal(
        user, meal_type="lunch", meal_date=day, meal_name="x", items=[{"food_name": "a", "calories": 1900}]
    )
    assert DailyStats.objects.get(user=user, stats_date=day).goal_achieved is True

    r = auth_client.patch(reverse("users_api:users-me"), {"daily_calorie_goal": 1500}, format="json")
    assert r.status_code == 200
    assert r.json()["daily_calorie_goal"] == 1500
    stats = DailyStats.objects.get(user=user, stats_date=day)
    assert stats.goal_achieved is False
    assert stats.total_calories == Decimal("1900")


@pytest.mark.django_db
def test_me_delete_cascades(auth_client, user):
    services.create_meal(
        user, meal_type="lunch", meal_date=date(2025, 3, 14), meal_name="x",
        items=[{"food_name": "a", "calories": 100}],
    )
    r = auth_client.delete(reverse("users_api:users-me"), {"current_password": "wrong"}, format="json")
    assert r.status_code == 400

    r = auth_client.delete(reverse("users_api:users-me"), {"current_password": "pw1234!"}, format="json")
    assert r.status_code == 204
    assert not User.objects.filter(pk=user.pk).exists()
    assert not DailyStats.objects.exists()


@pytest.mark.django_db
def test_only_staff_can_create_users(auth_client):
    payload = {"username": "x1", "email": "x1@a.com"}
    assert auth_client.post(reverse("users_api:users-list"), payload, format="json").status_code == 403


@pytest.mark.django_db
def test_staff_sees_all_users(staff_client, user, other_user):
    r = staff_client.get(reverse("users_api:users-list"))
    assert r.status_code == 200
    data = r.json()
    rows = data["results"] if isinstance(data, dict) else data
    assert {row["username"] for row in rows} >= {"alice", "bob", "admin"}
