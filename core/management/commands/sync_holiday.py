from django.core.management.base import BaseCommand, CommandError

from core.exceptions import PulpitoError
from core.models import Holiday
from core.services.holidays import add_holiday, remove_holiday


class Command(BaseCommand):
    help = "Add or remove a holiday and shift the start time of that day's services."

    def add_arguments(self, parser):
        parser.add_argument("--date", help="Holiday date (YYYY-MM-DD).")
        parser.add_argument(
            "--category",
            choices=[code for code, _label in Holiday.CATEGORY_CHOICES],
            default=Holiday.CATEGORY_NATIONAL,
        )
        parser.add_argument("--description", default="")
        parser.add_argument("--remove", type=int, metavar="ID", help="Remove the holiday with this id.")

    def handle(self, *args, **options):
        try:
            if options.get("remove"):
                result = remove_holiday(options["remove"])
                action = "removed"
            elif options.get("date"):
                result = add_holiday(options["date"], options["category"], options["description"])
                action = "added"
            else:
                raise CommandError("Use --date to add a holiday or --remove ID to delete one.")
        except PulpitoError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Holiday {action} for {result.date}: {len(result.shifted)} shifted, "
                f"{len(result.skipped)} skipped, {len(result.failed)} failed"
            )
        )
        if result.failed:
            self.stderr.write(self.style.WARNING(f"Services not shifted: {', '.join(map(str, result.failed))}"))
