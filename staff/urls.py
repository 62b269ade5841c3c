from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import WorkingHoursViewSet, TimeOffViewSet

router = DefaultRouter()
router.register(r"working-hours", WorkingHoursViewSet, basename="working-hours")
router.register(r"time-off", TimeOffViewSet, basename="time-off")

urlpatterns = [path("", include(router.urls))]
