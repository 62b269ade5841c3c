# booking/views.py
#
# Purpose:
# - REST API over the scheduling core: services, staff (with schedule and
#   cascade actions), appointments (lifecycle actions), availability.
# - Permissions:
#   * Reads of services/staff are public; writes are staff-only.
#   * Booking and cancelling an appointment need no login (public flow).
#   * Listing appointments, status changes and rescheduling are staff-only.
#
# Notes for developers:
# - Views only translate HTTP <-> service calls. Scheduling errors raised by the
#   services (SlotConflict, InvalidTransition, ...) are rendered by
#   booking.exceptions.scheduling_exception_handler.
#
from django.db import transaction

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, BasePermission
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.models import TimeOff
from staff.serializers import TimeOffSerializer, WorkingHoursSerializer
from .models import Service, Staff, Appointment
from .serializers import (
    ServiceSerializer,
    StaffSerializer,
    StaffServicesSerializer,
    AppointmentSerializer,
    AppointmentCreateSerializer,
    AppointmentStatusSerializer,
    AppointmentRescheduleSerializer,
    SlotSerializer,
)
from .exceptions import ValidationError
from .services.appointment_manager import ADMIN, CLIENT, AppointmentManager
from .services.availability_engine import AvailabilityEngine
from .services.cascade import CascadeCoordinator
from .services.slot_utils import day_window, parse_date_param
from .services.working_hours import replace_working_hours


# -------------------- Permissions --------------------
class IsStaffOrReadOnly(BasePermission):
    """
    Read: anyone
    Write: staff only
    """
    def has_permission(self, request, view):
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return True
        return bool(request.user and request.user.is_staff)


class IsStaffOnly(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)


def _is_admin(request) -> bool:
    return bool(request.user and request.user.is_staff)


def _parse_date(raw, name="date"):
    try:
        return parse_date_param(raw)
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid {name}. Use YYYY-MM-DD.")


# -------------------- ViewSets --------------------
class ServiceViewSet(viewsets.ModelViewSet):
    """
    Service catalog:
    - Anyone can list active services; staff see inactive ones too.
    - Only staff can create/update/delete services.
    """
    serializer_class = ServiceSerializer
    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        qs = Service.objects.all().order_by("id")
        if _is_admin(self.request):
            return qs
        return qs.filter(active=True)


class StaffViewSet(viewsets.ModelViewSet):
    """
    Endpoints:
    - GET    /api/staff/?service=ID            active staff (optionally qualified for a service)
    - DELETE /api/staff/{id}/                  cascade: future appointments -> RESCHEDULE_PENDING
    - GET    /api/staff/{id}/time-off/         list time off
    - POST   /api/staff/{id}/time-off/         create time off (cascade)
    - GET    /api/staff/{id}/working-hours/    weekly schedule
    - PUT    /api/staff/{id}/working-hours/    replace weekly schedule
    - PUT    /api/staff/{id}/services/         replace qualified services
    """
    serializer_class = StaffSerializer
    permission_classes = [IsStaffOrReadOnly]
    cascade = CascadeCoordinator()

    def get_queryset(self):
        qs = Staff.objects.all().prefetch_related("services").order_by("id")
        if not _is_admin(self.request):
            qs = qs.filter(active=True)
        service_id = (self.request.query_params.get("service") or "").strip()
        if service_id:
            qs = qs.filter(services__pk=service_id)
        return qs

    def destroy(self, request, *args, **kwargs):
        staff = self.get_object()
        affected = self.cascade.delete_staff(staff)
        return Response({"affected_appointments": affected}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get", "post"], url_path="time-off")
    def time_off(self, request, pk=None):
        staff = self.get_object()

        if request.method == "GET":
            qs = TimeOff.objects.filter(staff=staff).order_by("-start_time")
            return Response(TimeOffSerializer(qs, many=True).data)

        serializer = TimeOffSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        time_off, affected = self.cascade.create_time_off(
            staff,
            type=data.get("type", TimeOff.OTHER),
            starts_at=data["start_time"],
            ends_at=data["end_time"],
            reason=data.get("reason", ""),
        )
        return Response(
            {"time_off": TimeOffSerializer(time_off).data, "affected_appointments": affected},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["get", "put"], url_path="working-hours")
    def working_hours(self, request, pk=None):
        staff = self.get_object()

        if request.method == "GET":
            return Response(WorkingHoursSerializer(staff.working_hours.all(), many=True).data)

        serializer = WorkingHoursSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        rows = replace_working_hours(staff, serializer.validated_data)
        return Response(WorkingHoursSerializer(rows, many=True).data)

    @action(detail=True, methods=["put"], url_path="services")
    def services(self, request, pk=None):
        staff = self.get_object()
        serializer = StaffServicesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            staff.services.set(serializer.validated_data["services"])
        return Response(StaffSerializer(staff).data)


class AppointmentViewSet(viewsets.ModelViewSet):
    """
    Endpoints:
    - POST   /api/appointments/                   create (PENDING)
    - GET    /api/appointments/?status=&staff=&date_from=&date_to=   (staff only)
    - PATCH  /api/appointments/{id}/              edit notes (staff only)
    - DELETE /api/appointments/{id}/              cancel
    - PATCH  /api/appointments/{id}/status/       administrative status change
    - POST   /api/appointments/{id}/reschedule/   reassign a RESCHEDULE_PENDING appointment
    """
    serializer_class = AppointmentSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    manager = AppointmentManager()

    def get_permissions(self):
        if self.action in ("create", "retrieve", "destroy"):
            return [AllowAny()]
        return [IsStaffOnly()]

    def get_queryset(self):
        qs = Appointment.objects.select_related("service", "staff", "client").order_by("start_time", "id")
        params = self.request.query_params

        status_filter = (params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        staff_id = (params.get("staff") or "").strip()
        if staff_id:
            qs = qs.filter(staff_id=staff_id)

        date_from = (params.get("date_from") or "").strip()
        if date_from:
            qs = qs.filter(start_time__gte=day_window(_parse_date(date_from, "date_from"))[0])

        date_to = (params.get("date_to") or "").strip()
        if date_to:
            qs = qs.filter(start_time__lt=day_window(_parse_date(date_to, "date_to"))[1])

        return qs

    def create(self, request, *args, **kwargs):
        serializer = AppointmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        appointment = self.manager.create_appointment(
            client=data["client"],
            service=data["service"],
            start_time=data["start_time"],
            staff=data.get("staff"),
            notes=data.get("notes", ""),
            actor=ADMIN if _is_admin(request) else CLIENT,
        )

        out = AppointmentSerializer(appointment)
        headers = self.get_success_headers(out.data)
        return Response(out.data, status=status.HTTP_201_CREATED, headers=headers)

    def destroy(self, request, *args, **kwargs):
        """
        Cancel (never hard-delete). Admins bypass the client cancellation cutoff.
        """
        appointment = self.get_object()
        actor = ADMIN if _is_admin(request) else CLIENT
        appointment = self.manager.cancel_appointment(appointment, actor=actor)
        return Response(
            {"detail": "Appointment cancelled.", "appointment": AppointmentSerializer(appointment).data},
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        appointment = self.get_object()
        serializer = AppointmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appointment = self.manager.set_status(appointment, serializer.validated_data["status"])
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=True, methods=["post"], url_path="reschedule")
    def reschedule(self, request, pk=None):
        appointment = self.get_object()
        serializer = AppointmentRescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        appointment = self.manager.reschedule_appointment(
            appointment,
            start_time=data["start_time"],
            staff=data.get("staff"),
        )
        return Response(AppointmentSerializer(appointment).data)


class AvailabilityView(APIView):
    """
    GET /api/availability/?date=YYYY-MM-DD&service=ID[&staff=ID]

    Returns {"date", "service", "staff", "slots": [{"time", "available"}, ...]}.
    Past dates are answered like any other; filtering is the caller's job.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        service_id = (request.query_params.get("service") or "").strip()
        date_raw = (request.query_params.get("date") or "").strip()
        staff_id = (request.query_params.get("staff") or "").strip() or None

        if not service_id or not date_raw:
            raise ValidationError("Missing 'service' or 'date'.")

        day = _parse_date(date_raw)
        slots = AvailabilityEngine().get_available_slots(day, service_id, staff_id)

        return Response({
            "date": day.isoformat(),
            "service": service_id,
            "staff": staff_id,
            "slots": SlotSerializer(slots, many=True).data,
        })
