import os

os.environ.setdefault("JWT_SECRET", "testing-only-signing-key-not-for-deployment")

from .base import *

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Login throttling shares the in-process cache across tests.
RATELIMIT_ENABLE = False

LOGGING["root"]["level"] = "WARNING"
