from django.core.management.base import BaseCommand, CommandError
from accounts.services import AdminAlreadyExists, bootstrap_initial_admin


class Command(BaseCommand):
    help = "Create the initial admin account if the site has not been bootstrapped"

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--name", default="")

    def handle(self, *args, **options):
        try:
            admin = bootstrap_initial_admin(
                options["email"], options["password"], display_name=options["name"]
            )
        except AdminAlreadyExists:
            raise CommandError("Site already bootstrapped; an admin account exists")
        self.stdout.write(self.style.SUCCESS(f"Created initial admin {admin.email}"))
