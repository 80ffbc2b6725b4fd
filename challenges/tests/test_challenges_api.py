from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from challenges.models import Event, EventParticipant, LeaderboardEntry
from challenges.services import event_standings, refresh_leaderboard
from meals import services

D = date(2025, 3, 14)


def _eat(user, day, calories, meal_type="lunch"):
    return services.create_meal(
        user, meal_type=meal_type, meal_date=day, meal_name="x",
        items=[{"food_name": "food", "calories": calories}] if calories is not None else [],
    )


def _event(**kwargs):
    defaults = {
        "event_name": "March Challenge",
        "event_start_date": date(2025, 3, 10),
        "event_end_date": date(2025, 3, 20),
        "event_type": "calorie",
        "daily_target": 1800,
    }
    defaults.update(kwargs)
    return Event.objects.create(**defaults)


@pytest.mark.django_db
def test_only_staff_can_create_events(auth_client, staff_client):
    payload = {
        "event_name": "Spring",
        "event_start_date": "2025-04-01",
        "event_end_date": "2025-04-14",
        "event_type": "calorie",
        "daily_target": 1800,
    }
    assert auth_client.post(reverse("event-list"), payload, format="json").status_code == 403
    r = staff_client.post(reverse("event-list"), payload, format="json")
    assert r.status_code == 201, r.content
    assert r.json()["participant_count"] == 0


@pytest.mark.django_db
def test_event_validation(staff_client):
    base = {"event_name": "Bad", "event_type": "calorie"}
    r = staff_client.post(
        reverse("event-list"),
        {**base, "event_start_date": "2025-04-10", "event_end_date": "2025-04-01", "daily_target": 1800},
        format="json",
    )
    assert r.status_code == 400
    r = staff_client.post(
        reverse("event-list"),
        {**base, "event_start_date": "2025-04-01", "event_end_date": "2025-04-10", "daily_target": 0},
        format="json",
    )
    assert r.status_code == 400


@pytest.mark.django_db
def test_active_events(auth_client):
    today = timezone.localdate()
    current = _event(event_start_date=today - timedelta(days=1), event_end_date=today + timedelta(days=1))
    _event(event_name="past", event_start_date=today - timedelta(days=10), event_end_date=today - timedelta(days=5))
    r = auth_client.get(reverse("event-active"))
    assert r.status_code == 200
    assert [e["id"] for e in r.json()] == [current.id]


@pytest.mark.django_db
def test_join_is_idempotent_and_leave(auth_client, user):
    event = _event()
    r = auth_client.post(reverse("event-join", args=[event.id]))
    assert r.status_code == 201
    r = auth_client.post(reverse("event-join", args=[event.id]))
    assert r.status_code == 200
    assert EventParticipant.objects.filter(event=event, user=user).count() == 1

    mine = auth_client.get(reverse("event-mine")).json()
    assert [e["id"] for e in mine] == [event.id]

    participants = auth_client.get(reverse("event-participants", args=[event.id])).json()
    assert [p["username"] for p in participants] == ["alice"]

    assert auth_client.post(reverse("event-leave", args=[event.id])).status_code == 204
    assert auth_client.post(reverse("event-leave", args=[event.id])).status_code == 404


@pytest.mark.django_db
def test_event_standings(user, other_user):
    event = _event()
    EventParticipant.objects.create(event=event, user=user)
    EventParticipant.objects.create(event=event, user=other_user)

    _eat(user, date(2025, 3, 11), 1500)
    _eat(user, date(2025, 3, 12), 1800)
    _eat(user, date(2025, 3, 13), 2500)
    _eat(user, date(2025, 3, 25), 1000)  # 기간 밖
    _eat(other_user, date(2025, 3, 11), 1900)

    standings = event_standings(event)
    assert standings[0] == {
        "user_id": user.id,
        "username": "alice",
        "joined_date": timezone.localdate().isoformat(),
        "days_logged": 3,
        "days_on_target": 2,
    }
    assert standings[1]["username"] == "bob"
    assert standings[1]["days_on_target"] == 0
    assert standings[1]["days_logged"] == 1


@pytest.mark.django_db
def test_refresh_leaderboard_ranks_achievers(user, other_user):
    from django.contrib.auth import get_user_model

    User = get_user_model()
    carol = User.objects.create_user(username="carol", email="c@c.com", password="pw1234!")
    dave = User.objects.create_user(username="dave", email="d@d.com", password="pw1234!")
    erin = User.objects.create_user(username="erin", email="e@e.com", password="pw1234!")

    _eat(user, D, 1500)
    _eat(other_user, D, 1200)
    _eat(carol, D, 1500)
    _eat(dave, D, 2500)     # 목표 초과
    _eat(erin, D, None)     # 빈 끼니 → 0kcal 이지만 포함

    entries = refresh_leaderboard(D)
    ranking = [(e.user_id, e.rank, e.total_calories) for e in entries]
    assert ranking == [
        (erin.id, 1, Decimal("0.00")),
        (other_user.id, 2, Decimal("1200.00")),
        (user.id, 3, Decimal("1500.00")),
        (carol.id, 3, Decimal("1500.00")),
    ]

    # 다시 계산해도 중복 없음
    refresh_leaderboard(D)
    assert LeaderboardEntry.objects.filter(challenge_date=D).count() == 4


@pytest.mark.django_db
def test_refresh_leaderboard_overwrites_existing_rows(user, other_user):
    # 다른 요청이 먼저 써 둔 행이 있어도 unique 충돌 없이 갱신
    LeaderboardEntry.objects.create(user=user, challenge_date=D, total_calories=Decimal("9"), rank=7)
    LeaderboardEntry.objects.create(user=other_user, challenge_date=D, total_calories=Decimal("1"), rank=1)
    _eat(user, D, 1500)
    _eat(other_user, D, 2500)     # 목표 초과 → 빠져야 함

    refresh_leaderboard(D)

    rows = list(LeaderboardEntry.objects.filter(challenge_date=D).values_list("user_id", "rank", "total_calories"))
    assert rows == [(user.id, 1, Decimal("1500.00"))]


@pytest.mark.django_db
def test_leaderboard_endpoint(auth_client, user, other_user):
    _eat(user, D, 1500)
    _eat(other_user, D, 1200)
    r = auth_client.get(reverse("leaderboard"), {"date": "2025-03-14", "limit": 1})
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert body["results"] == [
        {"rank": 1, "user": other_user.id, "username": "bob", "challenge_date": "2025-03-14", "total_calories": 1200.0}
    ]
