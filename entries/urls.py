from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import DailyEntryViewSet

router = SimpleRouter()
router.register("", DailyEntryViewSet, basename="entries")

urlpatterns = [
    path("", include(router.urls)),
]
