from django.conf import settings
from django.contrib.staticfiles.management.commands.runserver import Command as RunserverCommand


class Command(RunserverCommand):
    """runserver that listens on settings.PORT (the PORT env var) by default."""
    default_port = str(settings.PORT)
