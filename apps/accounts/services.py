# apps/accounts/services.py
import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import transaction

from apps.core.exceptions import Conflict
from .tokens import issue_token

logger = logging.getLogger(__name__)

User = get_user_model()


@transaction.atomic
def register_user(*, email, password, role=User.LEARNER, first_name='', last_name=''):
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict("User already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        role=role,
        first_name=first_name,
        last_name=last_name,
    )
    logger.info(f"Registered {user.role} {user.email}")
    return user, issue_token(user)


def login_user(*, email, password, request=None):
    """Returns (user, token) or None on bad credentials."""
    user = authenticate(request, username=email.lower(), password=password)
    if user is None:
        logger.info(f"Failed login for {email}")
        return None
    return user, issue_token(user)
