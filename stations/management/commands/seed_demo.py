# stations/management/commands/seed_demo.py

from django.core.management.base import BaseCommand

from alerts.services.alerting import evaluate_alerts
from core.store import StateStore, ensure_demo_users
from stations.models import Station


class Command(BaseCommand):
    help = "Creates the demo stations, fuel lines and user accounts"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Replace existing stations, entries and alerts",
        )

    def handle(self, *args, **options):
        if options["flush"] or not Station.objects.exists():
            report = StateStore().load_state({}, replace=options["flush"])
            for station in report.stations:
                self.stdout.write(self.style.SUCCESS(f"Station {station.name} created"))
        else:
            self.stdout.write(self.style.WARNING("Stations already present, keeping them"))

        stations = list(Station.objects.order_by("id"))
        for user in ensure_demo_users(stations):
            self.stdout.write(self.style.SUCCESS(f"User {user.email} ({user.role}) created"))

        created = evaluate_alerts()

        self.stdout.write(
            self.style.WARNING(
                f"{len(created)} alert(s) raised on the demo network"
            )
        )
