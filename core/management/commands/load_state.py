from django.core.management.base import BaseCommand, CommandError

from core.store import StateStore, SNAPSHOT_KEYS


class Command(BaseCommand):
    help = "Loads a JSON snapshot; unreadable keys fall back to their seed value"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Snapshot file")
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Wipe existing stations, entries and alerts first",
        )

    def handle(self, *args, **options):
        try:
            with open(options["path"], encoding="utf-8") as fh:
                raw = fh.read()
        except OSError as exc:
            self.stderr.write(self.style.WARNING(f"Snapshot unreadable ({exc}), loading seed values"))
            raw = {}

        try:
            report = StateStore().load_state(raw, replace=options["replace"])
        except ValueError as exc:
            raise CommandError(str(exc))

        for key in SNAPSHOT_KEYS:
            origin = "seed" if key in report.fallbacks else "snapshot"
            self.stdout.write(f"  {key}: {origin}")

        self.stdout.write(
            self.style.SUCCESS(
                f"{len(report.stations)} station(s), {len(report.entries)} entr(y/ies), "
                f"{len(report.alerts)} alert(s) loaded"
            )
        )
