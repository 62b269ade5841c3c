"""
seed_salon.py
-------------
Seeds (creates or updates) demo data for the scheduling API: the service
catalog, a few staff members, their qualifications, and Mon-Fri working
hours. Safe to re-run; services and staff are upserted by name.

Usage:
    python manage.py seed_salon
    python manage.py seed_salon --reset-hours   # also rewrite working hours
"""

from datetime import time
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Service, Staff
from booking.services.working_hours import replace_working_hours


CATALOG = [
    {"name": "Manicure",          "description": "Classic manicure",        "duration_minutes": 60,  "price": Decimal("120.00")},
    {"name": "Gel Manicure",      "description": "Gel polish manicure",     "duration_minutes": 75,  "price": Decimal("160.00")},
    {"name": "Pedicure",          "description": "Classic pedicure",        "duration_minutes": 60,  "price": Decimal("140.00")},
    {"name": "Women's Haircut",   "description": "Cut and blow-dry",        "duration_minutes": 45,  "price": Decimal("180.00")},
    {"name": "Men's Haircut",     "description": "Cut and style",           "duration_minutes": 30,  "price": Decimal("90.00")},
    {"name": "Root Color",        "description": "Single-process color",    "duration_minutes": 90,  "price": Decimal("260.00")},
    {"name": "Eyebrow Shaping",   "description": "Wax and shape",           "duration_minutes": 15,  "price": Decimal("50.00")},
]

TEAM = [
    {"name": "Dana",  "role": "Nail technician", "services": ["Manicure", "Gel Manicure", "Pedicure"]},
    {"name": "Noa",   "role": "Stylist",         "services": ["Women's Haircut", "Men's Haircut", "Root Color"]},
    {"name": "Maya",  "role": "Beautician",      "services": ["Manicure", "Eyebrow Shaping"]},
]

# Monday..Friday (Sunday=0), split shift with a lunch break.
WEEKDAY_HOURS = [
    {"weekday": day, "start_time": start, "end_time": end}
    for day in (1, 2, 3, 4, 5)
    for start, end in ((time(9, 0), time(13, 0)), (time(14, 0), time(18, 0)))
]


class Command(BaseCommand):
    help = "Seed or update demo services, staff, qualifications and working hours."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset-hours",
            action="store_true",
            help="Replace working hours even for staff that already have some.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        updated = 0

        services = {}
        for item in CATALOG:
            svc, is_created = Service.objects.get_or_create(
                name=item["name"],
                defaults={
                    "description": item["description"],
                    "duration_minutes": item["duration_minutes"],
                    "price": item["price"],
                    "active": True,
                },
            )
            if is_created:
                created += 1
            else:
                fields = {k: v for k, v in item.items() if k != "name" and getattr(svc, k) != v}
                if fields or not svc.active:
                    for key, value in fields.items():
                        setattr(svc, key, value)
                    svc.active = True
                    svc.save()
                    updated += 1
            services[svc.name] = svc

        for member in TEAM:
            staff, is_created = Staff.objects.get_or_create(
                name=member["name"],
                defaults={"role": member["role"], "active": True},
            )
            staff.services.set([services[name] for name in member["services"]])
            if is_created:
                created += 1
            if is_created or options["reset_hours"] or not staff.working_hours.exists():
                replace_working_hours(staff, WEEKDAY_HOURS)

        self.stdout.write(self.style.SUCCESS(f"Seed complete. Created={created}, Updated={updated}"))
