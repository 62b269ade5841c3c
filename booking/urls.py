# booking/urls.py
#
# Purpose:
# - Expose the scheduling REST API via DRF router.
#
# Notes for developers:
# - Availability is a plain APIView (query-only, no model behind it).
# - Staff schedule actions (time-off, working-hours, services) hang off the
#   staff router entry; individual time-off rows are edited under
#   /api/schedule/ (staff.urls).

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    ServiceViewSet,
    StaffViewSet,
    AppointmentViewSet,
    AvailabilityView,
)

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"staff", StaffViewSet, basename="staff")
router.register(r"appointments", AppointmentViewSet, basename="appointment")

# --------------------------
# URL patterns
# --------------------------
urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("", include(router.urls)),
]
