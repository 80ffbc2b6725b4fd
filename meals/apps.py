# meals/apps.py
from django.apps import AppConfig


class MealsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "meals"
    verbose_name = "식단 기록"
    # DailyStats 갱신은 시그널이 아니라 meals.services 의 명시적 호출로만 일어난다
