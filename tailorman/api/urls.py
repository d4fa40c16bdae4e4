"""
Tailorman API URLs.

Include this in your project's urlpatterns:

    path('api/tailorman/', include('tailorman.api.urls')),
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import BinViewSet, OrderViewSet, ProductionRequestViewSet, ScanView, UnitViewSet

router = DefaultRouter()
router.register("units", UnitViewSet)
router.register("orders", OrderViewSet)
router.register("production-requests", ProductionRequestViewSet)
router.register("bins", BinViewSet)

urlpatterns = [
    path("scan/", ScanView.as_view(), name="scan"),
    *router.urls,
]
