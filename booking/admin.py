from django.contrib import admin
from .models import Service, ClientProfile, Staff, Appointment

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "price", "duration_minutes", "active")
    list_filter = ("active",)
    search_fields = ("name",)

@admin.register(ClientProfile)
class ClientProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "phone")
    search_fields = ("name", "email")

@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "role", "active")
    list_filter = ("active",)
    filter_horizontal = ("services",)

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "service", "staff", "start_time", "end_time", "status")
    list_filter = ("status", "service", "staff")
    search_fields = ("client__name", "service__name")
    # Status changes belong to the API so the lifecycle rules apply.
    readonly_fields = ("status", "cancellation_time")
