from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import StationViewSet, ProcurementViewSet, StockMovementViewSet

router = SimpleRouter()
router.register("procurements", ProcurementViewSet, basename="procurements")
router.register("movements", StockMovementViewSet, basename="movements")
router.register("", StationViewSet, basename="stations")

urlpatterns = [
    path("", include(router.urls)),
]
