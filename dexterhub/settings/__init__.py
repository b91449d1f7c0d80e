import os
from dotenv import load_dotenv

load_dotenv()  # take environment variables from .env file


env = os.getenv("ENVIRONMENT", "development").lower()

# Only pick a module when the package itself is the settings module;
# DJANGO_SETTINGS_MODULE=dexterhub.settings.testing imports that module alone.
if os.getenv("DJANGO_SETTINGS_MODULE", "dexterhub.settings") == "dexterhub.settings":
    if env == "production":
        from .production import *
    elif env == "testing":
        from .testing import *
    else:
        from .development import *
