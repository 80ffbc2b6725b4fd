import pytest
from django.contrib.auth import get_user_model

User = get_user_model()


@pytest.mark.django_db
def test_user_str_and_defaults():
    u = User.objects.create_user(username="alice", email="a@a.com", password="pw1234!")
    assert str(u) == "alice"
    assert u.daily_calorie_goal == 2000


@pytest.mark.django_db
def test_email_is_normalized_on_save():
    u = User.objects.create_user(username="carol", email="  Carol@Example.COM ", password="pw1234!")
    u.refresh_from_db()
    assert u.email == "carol@example.com"


@pytest.mark.django_db
def test_default_goal_follows_setting(settings):
    settings.DEFAULT_DAILY_CALORIE_GOAL = 1800
    u = User.objects.create_user(username="dave", email="d@d.com", password="pw1234!")
    assert u.daily_calorie_goal == 1800
