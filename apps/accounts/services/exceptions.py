"""Errors raised by the accounts services and mapped to HTTP codes in views."""


class AccountsServiceError(Exception):
    """Base class for account errors."""


class UserRegistrationError(AccountsServiceError):
    """Sign-up refused (400)."""


class DuplicateAccountError(UserRegistrationError):
    """Email or username already taken by another account."""


class InvalidCredentialsError(AccountsServiceError):
    """Unknown email or wrong password (401)."""


class InactiveAccountError(AccountsServiceError):
    """Login attempt on a deactivated account (403)."""
