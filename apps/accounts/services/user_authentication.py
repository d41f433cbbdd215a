"""Email and password login."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)

INVALID_LOGIN_MESSAGE = "Invalid email or password"


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an email/password pair and stamp ``last_login``.

    The email is matched case-insensitively after normalisation, the same
    way it is stored at registration. Unknown emails and wrong passwords
    raise the same error.

    Raises:
        InvalidCredentialsError: If no account matches
        InactiveAccountError: If the account is deactivated
    """
    email = User.objects.normalize_email(email.strip())
    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=email)
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Failed login for %s", email)
        raise InvalidCredentialsError(INVALID_LOGIN_MESSAGE)

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("User %s logged in", user.id)
    return user
