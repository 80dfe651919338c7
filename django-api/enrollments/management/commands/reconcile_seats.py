from django.core.management.base import BaseCommand

from enrollments.services import SeatLedger
from enrollments.signals import invalidate_available_sections
from enrollments.stores import DjangoEnrollmentStore


class Command(BaseCommand):
    help = "Recompute seats_available for every course section from requests and enrollments."

    def handle(self, *args, **options):
        results = SeatLedger(DjangoEnrollmentStore()).reconcile_all()
        invalidate_available_sections()
        for section_id, seats in results.items():
            self.stdout.write(f"section {section_id}: {seats} seats available")
        self.stdout.write(self.style.SUCCESS(f"Reconciled {len(results)} sections"))
