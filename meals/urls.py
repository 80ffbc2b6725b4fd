from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DailyStatsViewSet, MealItemViewSet, MealViewSet

router = DefaultRouter()
router.register(r"meals", MealViewSet, basename="meal")
router.register(r"mealitems", MealItemViewSet, basename="mealitem")
router.register(r"dailystats", DailyStatsViewSet, basename="dailystats")

urlpatterns = [path("", include(router.urls))]
