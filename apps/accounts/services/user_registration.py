"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import DuplicateAccountError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    username: str,
    password: str,
    name: str = ""
) -> User:
    """
    Register a new user.

    Email and username are both unique; a clash on either is reported
    with the same message so the endpoint does not reveal which one exists.

    Args:
        email: User's email address
        username: Public handle used for friend lookups
        password: User's password (will be hashed)
        name: Display name

    Returns:
        Created User instance

    Raises:
        DuplicateAccountError: If a user with this email or username exists
    """
    if User.objects.filter(email__iexact=email).exists() or \
            User.objects.filter(username__iexact=username).exists():
        raise DuplicateAccountError("User with this email or username already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                username=username,
                password=password,
                name=name,
            )
    except IntegrityError:
        # Lost a race with a concurrent registration
        raise DuplicateAccountError("User with this email or username already exists")

    logger.info("Registered user %s", user.id)
    return user
