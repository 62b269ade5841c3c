from rest_framework import serializers
from .models import WorkingHours, TimeOff


class WorkingHoursSerializer(serializers.ModelSerializer):
    start_time = serializers.TimeField(format="%H:%M", input_formats=["%H:%M"])
    end_time = serializers.TimeField(format="%H:%M", input_formats=["%H:%M"])

    class Meta:
        model = WorkingHours
        fields = ["id", "weekday", "start_time", "end_time"]

    def validate(self, attrs):
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError("Working hours must end after they start.")
        return attrs


class TimeOffSerializer(serializers.ModelSerializer):
    """
    start_time/end_time accept any instant; the stored values are widened to
    whole local days by CascadeCoordinator.
    """

    class Meta:
        model = TimeOff
        fields = ["id", "staff", "type", "start_time", "end_time", "reason", "created_at"]
        read_only_fields = ["staff", "created_at"]