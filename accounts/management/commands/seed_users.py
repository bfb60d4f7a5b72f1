import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from accounts.models import Role

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create the default admin and team leader accounts if they do not exist yet.'

    def handle(self, *args, **options):
        User = get_user_model()
        seeds = [
            (settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD, 'Admin', Role.ADMIN),
            (settings.SEED_TEAM_LEADER_EMAIL, settings.SEED_TEAM_LEADER_PASSWORD, 'Team Leader', Role.TEAM_LEADER),
        ]

        for email, password, name, role in seeds:
            if not password:
                self.stdout.write(self.style.WARNING(f"No password configured for {email}, skipping."))
                continue
            if User.objects.filter(email=email.lower()).exists():
                self.stdout.write(f"{email} already exists.")
                continue
            User.objects.create_user(
                email=email,
                password=password,
                name=name,
                role=role,
                is_verified=True,
                is_staff=role == Role.ADMIN,
            )
            logger.info(f"Seeded {role} account {email}")
            self.stdout.write(self.style.SUCCESS(f"Created {role} account {email}."))
