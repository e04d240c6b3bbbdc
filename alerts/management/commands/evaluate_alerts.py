from django.core.management.base import BaseCommand

from alerts.services.alerting import evaluate_alerts


class Command(BaseCommand):
    help = "Runs one alert evaluation pass over all stations and entries"

    def handle(self, *args, **options):
        created = evaluate_alerts()

        for alert in created:
            self.stdout.write(f"  + [{alert.severity}] {alert.message}")

        self.stdout.write(
            self.style.SUCCESS(f"{len(created)} alert(s) created")
        )
