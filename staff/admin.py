# staff/admin.py
from django.contrib import admin
from .models import WorkingHours, TimeOff


@admin.register(WorkingHours)
class WorkingHoursAdmin(admin.ModelAdmin):
    list_display = ("staff", "weekday", "start_time", "end_time")
    list_filter = ("staff", "weekday")
    search_fields = ("staff__name",)


@admin.register(TimeOff)
class TimeOffAdmin(admin.ModelAdmin):
    # Admin edits bypass the appointment cascade; use the API to create time off.
    list_display = ("staff", "type", "start_time", "end_time", "reason")
    list_filter = ("type", "staff")
    search_fields = ("staff__name", "reason")
