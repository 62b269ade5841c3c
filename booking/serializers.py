from rest_framework import serializers
from django.utils import timezone

from .models import ClientProfile, Service, Staff, Appointment


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ["id", "name", "description", "duration_minutes", "price", "active"]


class StaffSerializer(serializers.ModelSerializer):
    services = serializers.PrimaryKeyRelatedField(
        queryset=Service.objects.all(), many=True, required=False
    )

    class Meta:
        model = Staff
        fields = ["id", "name", "email", "role", "bio", "active", "services", "created_at"]
        read_only_fields = ["created_at"]


class StaffServicesSerializer(serializers.Serializer):
    """PUT staff/{id}/services: replaces the qualification set."""
    services = serializers.PrimaryKeyRelatedField(queryset=Service.objects.all(), many=True)


class AppointmentSerializer(serializers.ModelSerializer):
    """
    Read shape of an appointment. Only 'notes' is writable through PATCH;
    every other change goes through AppointmentManager.
    """

    class Meta:
        model = Appointment
        fields = [
            "id",
            "client",
            "service",
            "staff",
            "start_time",
            "end_time",
            "status",
            "notes",
            "created_at",
            "cancellation_time",
        ]
        read_only_fields = [
            "client",
            "service",
            "staff",
            "start_time",
            "end_time",
            "status",
            "created_at",
            "cancellation_time",
        ]


def validate_future_start(value):
    # prevent past dates
    if value <= timezone.now():
        raise serializers.ValidationError("Start time must be in the future.")
    return value


class AppointmentCreateSerializer(serializers.Serializer):
    # Unknown ids fail here as 400 validation errors
    client = serializers.PrimaryKeyRelatedField(queryset=ClientProfile.objects.all())
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.all())
    staff = serializers.PrimaryKeyRelatedField(
        queryset=Staff.objects.all(), allow_null=True, required=False
    )
    start_time = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_start_time(self, value):
        return validate_future_start(value)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES)


class AppointmentRescheduleSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField()
    staff = serializers.PrimaryKeyRelatedField(
        queryset=Staff.objects.all(), allow_null=True, required=False
    )

    def validate_start_time(self, value):
        return validate_future_start(value)


class SlotSerializer(serializers.Serializer):
    time = serializers.DateTimeField()
    available = serializers.BooleanField()
