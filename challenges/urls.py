from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import EventViewSet, LeaderboardView

router = DefaultRouter()
router.register(r"events", EventViewSet, basename="event")

urlpatterns = [
    path("leaderboard/", LeaderboardView.as_view(), name="leaderboard"),
    path("", include(router.urls)),
]
