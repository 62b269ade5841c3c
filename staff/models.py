# staff/models.py
#
# Weekly working hours and time-off periods for booking.Staff.
#
from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator

WEEKDAY_CHOICES = [
    (0, "Sunday"),
    (1, "Monday"),
    (2, "Tuesday"),
    (3, "Wednesday"),
    (4, "Thursday"),
    (5, "Friday"),
    (6, "Saturday"),
]


class WorkingHours(models.Model):
    """
    One bookable interval [start_time, end_time) on a weekday (Sunday=0).
    A staff member may have several per weekday; they must not overlap.
    Points to booking.Staff to avoid having two Staff models.
    """
    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="working_hours",
    )
    weekday = models.PositiveSmallIntegerField(
        choices=WEEKDAY_CHOICES,
        validators=[MaxValueValidator(6)],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["staff_id", "weekday", "start_time"]
        verbose_name_plural = "working hours"

    def __str__(self):
        return (
            f"{self.staff.name}: {self.get_weekday_display()} "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
        )

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError("Working hours must end after they start.")


class TimeOff(models.Model):
    """
    A closed range of whole days during which a staff member is unavailable.
    start_time is always 00:00:00 and end_time 23:59:59.999 local time; see
    booking.services.time_off.normalize_time_off_bounds.
    """
    SICK_LEAVE = "SICK_LEAVE"
    VACATION = "VACATION"
    OTHER = "OTHER"

    TYPE_CHOICES = [
        (SICK_LEAVE, "Sick leave"),
        (VACATION, "Vacation"),
        (OTHER, "Other"),
    ]

    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="time_offs",
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=OTHER)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-start_time"]
        verbose_name_plural = "time off"

    def __str__(self):
        return f"{self.staff.name}: {self.get_type_display()} {self.start_time:%Y-%m-%d} - {self.end_time:%Y-%m-%d}"
