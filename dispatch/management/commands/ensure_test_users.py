# dispatch/management/commands/ensure_test_users.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from dispatch.models import User

TEST_SET = [
    ("admin@pulseride.test", User.ROLE_ADMIN),
    ("user@pulseride.test", User.ROLE_USER),
]


class Command(BaseCommand):
    help = "Ensure test users exist with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="P@ssw0rd1")

    def handle(self, *args, **opts):
        password = opts["password"]
        for email, role in TEST_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "role": role, "password": make_password(password), "is_active": True},
            )
            if not created:
                # reset password, role and activation
                u.password = make_password(password)
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
