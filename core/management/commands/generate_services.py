from datetime import date

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import ValidationError
from core.services.calendar_generation import generate_services_for_month


class Command(BaseCommand):
    help = "Generate the services of a month from the weekly schedule."

    def add_arguments(self, parser):
        today = date.today()
        parser.add_argument("--year", type=int, default=today.year)
        parser.add_argument("--month", type=int, default=today.month)

    def handle(self, *args, **options):
        try:
            created = generate_services_for_month(options["year"], options["month"])
        except ValidationError as exc:
            raise CommandError(exc.message) from exc
        self.stdout.write(
            self.style.SUCCESS(f"{options['month']:02d}/{options['year']}: created {len(created)} services")
        )
