"""
URL configuration for the trips app.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import DriverViewSet, TripSearchView, TripViewSet, VehicleViewSet

router = DefaultRouter()
router.register(r'trips', TripViewSet, basename='trip')
router.register(r'vehicles', VehicleViewSet, basename='vehicle')
router.register(r'drivers', DriverViewSet, basename='driver')

urlpatterns = [
    path('trips/search/', TripSearchView.as_view(), name='trip-search'),
    path('', include(router.urls)),
]
