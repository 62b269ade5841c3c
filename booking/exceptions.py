"""
exceptions.py
-------------
Errors raised by the scheduling services, and the DRF exception handler that
turns them into JSON responses.

Views never build error responses for these by hand: services raise, and
scheduling_exception_handler (REST_FRAMEWORK["EXCEPTION_HANDLER"]) renders
{"detail": ..., "code": ...} with the status code of the error class.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class SchedulingError(Exception):
    """Base class for scheduling failures surfaced to the caller."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "scheduling_error"
    default_detail = "Scheduling request failed."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(SchedulingError):
    """Malformed input: bad dates, inactive service, unqualified staff, ..."""

    code = "validation_error"
    default_detail = "Invalid input."


class NotFound(SchedulingError):
    """Referenced staff/service/appointment/time-off does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found."


class SlotConflict(SchedulingError):
    """The interval overlaps an active appointment for the resolved staff member."""

    status_code = status.HTTP_409_CONFLICT
    code = "slot_conflict"
    default_detail = "Selected time overlaps with an existing appointment."


class InvalidTransition(SchedulingError):
    """A status change the appointment lifecycle doesn't allow."""

    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"
    default_detail = "Status change is not allowed."


class OperationFailed(SchedulingError):
    """A cascade could not complete and was rolled back; the caller may retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "operation_failed"
    default_detail = "Operation failed and was rolled back. Please retry."


def scheduling_exception_handler(exc, context):
    if isinstance(exc, SchedulingError):
        return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)
    return exception_handler(exc, context)
