# booking_system/urls.py
#
# Purpose:
# - Project URL router.
# - JSON APIs live under /api/; Django admin under /admin/.
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    path("api/schedule/", include("staff.urls")),
    path("api/", include("booking.urls")),
]
