"""
Initialise the ledger with its chief medical officer.

    python manage.py init_ledger cmo@stmarys-hospital.org

Runs once per deployment. The administrator can never be changed afterwards.
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.ledger.exceptions import LedgerAlreadyInitialized
from apps.ledger.services import initialize_ledger

User = get_user_model()


class Command(BaseCommand):
    help = "Create the ledger's SystemState and fix its administrator."

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email of the existing user who becomes administrator.")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        try:
            administrator = User.objects.live().get(email=email)
        except User.DoesNotExist:
            raise CommandError(f"No active user found with email '{email}'.")

        try:
            state = initialize_ledger(administrator)
        except LedgerAlreadyInitialized as e:
            raise CommandError(e.message)

        self.stdout.write(
            self.style.SUCCESS(f"Ledger initialised. Administrator: {state.administrator}")
        )
