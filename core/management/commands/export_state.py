from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from core.store import StateStore


class Command(BaseCommand):
    help = "Writes the user / stations / entries / alerts snapshot as JSON"

    def add_arguments(self, parser):
        parser.add_argument("--output", "-o", help="File to write (stdout when omitted)")
        parser.add_argument("--user", help="Email of the signed-in user to record under 'user'")

    def handle(self, *args, **options):
        user = None
        if options["user"]:
            try:
                user = get_user_model().objects.get(email=options["user"])
            except get_user_model().DoesNotExist:
                raise CommandError(f"No user with email {options['user']}")

        payload = StateStore().dumps(user=user)

        if not options["output"]:
            self.stdout.write(payload)
            return

        try:
            with open(options["output"], "w", encoding="utf-8") as fh:
                fh.write(payload)
        except OSError as exc:
            raise CommandError(f"Could not write snapshot: {exc}")

        self.stdout.write(self.style.SUCCESS(f"Snapshot written to {options['output']}"))
