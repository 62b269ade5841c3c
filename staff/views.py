from rest_framework import mixins, status, viewsets
from rest_framework.response import Response

from booking.services.cascade import CascadeCoordinator
from booking.views import IsStaffOnly
from .models import WorkingHours, TimeOff
from .serializers import WorkingHoursSerializer, TimeOffSerializer


class WorkingHoursViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only view of every weekly schedule (?staff=ID&weekday=N).
    Schedules are replaced as a whole via PUT /api/staff/{id}/working-hours/.
    """
    serializer_class = WorkingHoursSerializer
    permission_classes = [IsStaffOnly]

    def get_queryset(self):
        qs = WorkingHours.objects.all().order_by("staff_id", "weekday", "start_time")
        staff_id = (self.request.query_params.get("staff") or "").strip()
        if staff_id:
            qs = qs.filter(staff_id=staff_id)
        weekday = (self.request.query_params.get("weekday") or "").strip()
        if weekday:
            qs = qs.filter(weekday=weekday)
        return qs


class TimeOffViewSet(mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     mixins.DestroyModelMixin,
                     mixins.ListModelMixin,
                     viewsets.GenericViewSet):
    """
    Edit or remove existing time off. Creation goes through
    POST /api/staff/{id}/time-off/ so the cascade runs with it.
    Updates re-run the cascade for the new window.
    """
    queryset = TimeOff.objects.select_related("staff").order_by("-start_time")
    serializer_class = TimeOffSerializer
    permission_classes = [IsStaffOnly]
    http_method_names = ["get", "patch", "delete", "head", "options"]
    cascade = CascadeCoordinator()

    def update(self, request, *args, **kwargs):
        time_off = self.get_object()
        serializer = self.get_serializer(time_off, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        time_off, affected = self.cascade.update_time_off(time_off, **serializer.validated_data)
        return Response(
            {"time_off": TimeOffSerializer(time_off).data, "affected_appointments": affected},
            status=status.HTTP_200_OK,
        )
