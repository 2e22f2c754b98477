from django.conf import settings
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

User = get_user_model()


class Command(BaseCommand):
    help = "Creates the default Admin account when the database has no users."

    def handle(self, *args, **options):
        existing = User.objects.all()

        if existing.exists():
            self.stdout.write(self.style.SUCCESS(
                f"Banco já configurado! {existing.count()} usuário(s):"
            ))
            for user in existing:
                self.stdout.write(f"   - {user.display_name} ({user.email}) - {user.role}")
            return

        email = settings.FRAMETY_DEFAULT_ADMIN_EMAIL
        User.objects.create_superuser(
            username="admin",
            email=email,
            password=settings.FRAMETY_DEFAULT_ADMIN_PASSWORD,
            name="Admin",
            role=User.ROLE_ADMIN,
        )

        self.stdout.write(self.style.SUCCESS("Usuário admin criado!"))
        self.stdout.write(f"   Email: {email}")
        self.stdout.write(self.style.WARNING("IMPORTANTE: altere esta senha após o primeiro login!"))
