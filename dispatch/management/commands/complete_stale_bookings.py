from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand

from dispatch.services.lifecycle import complete_stale_bookings


class Command(BaseCommand):
    help = "Complete ACTIVE bookings older than --hours and release their ambulances."

    def add_arguments(self, parser):
        parser.add_argument("--hours", type=float, default=settings.STALE_BOOKING_HOURS)

    def handle(self, *args, **opts):
        done = complete_stale_bookings(timedelta(hours=opts["hours"]))
        self.stdout.write(self.style.SUCCESS(f"Completed {done} stale booking(s)"))
