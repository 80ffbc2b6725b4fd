from rest_framework.routers import DefaultRouter

from .views import AIViewSet

router = DefaultRouter()
router.register(r"", AIViewSet, basename="ai")

urlpatterns = router.urls
