"""
Domain-specific exceptions for accounts services.

Like the households errors, each carries a ``code`` for clients and the
HTTP ``status_code`` the auth views answer with.
"""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    code = 'accounts_error'
    status_code = 400


class UserRegistrationError(AccountsServiceError):
    """Raised when the email is already taken."""
    code = 'registration_failed'


class InvalidCredentialsError(AccountsServiceError):
    code = 'invalid_credentials'
    status_code = 401


class InactiveAccountError(AccountsServiceError):
    code = 'inactive_account'
    status_code = 403
