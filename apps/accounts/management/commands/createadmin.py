from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

User = get_user_model()


class Command(BaseCommand):
    help = "Create an admin or super-admin account."

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('--role', choices=[User.ADMIN, User.SUPER_ADMIN], default=User.ADMIN)
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f"User {email} already exists")

        is_super = options['role'] == User.SUPER_ADMIN
        user = User.objects.create_user(
            email=email,
            password=options['password'],
            role=options['role'],
            first_name=options['first_name'],
            last_name=options['last_name'],
            is_staff=True,
            is_superuser=is_super,
        )
        self.stdout.write(self.style.SUCCESS(f"Created {user.role} {user.email}"))
