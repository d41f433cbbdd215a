"""Sign-up and login for the email-based User model."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user

__all__ = [
    'AccountsServiceError',
    'UserRegistrationError',
    'DuplicateAccountError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'register_user',
    'authenticate_user',
]
