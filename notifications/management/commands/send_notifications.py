from django.core.management.base import BaseCommand

from notifications.services import NotificationService


class Command(BaseCommand):
    help = "Send pending email notifications."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=50)

    def handle(self, *args, **options):
        service = NotificationService()
        sent = service.send_pending(limit=options["limit"])
        self.stdout.write(self.style.SUCCESS(f"Notifications processed: {sent} sent"))
