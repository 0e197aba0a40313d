"""
auth/errors.py -- Domain exceptions raised by the auth layer.

Account operations raise AccountError subclasses; api/main.py turns each one
into the shared ErrorResponse envelope using the class's code and status_code.
Token verification raises AuthError subclasses, which the auth gate converts
into HTTP 401 before a protected handler runs.

Layer rule: no imports from api/ or activity/. The status codes are plain
ints so this module stays free of FastAPI.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for failures reported at the account-operation boundary."""

    code = "account_error"
    status_code = 400
    message = "Account operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class Conflict(AccountError):
    code = "conflict"
    status_code = 409
    message = "A user with that email already exists."


class NotFound(AccountError):
    code = "not_found"
    status_code = 404
    message = "User not found."


class InvalidCredentials(AccountError):
    code = "bad_credentials"
    status_code = 401
    message = "Invalid credentials."


class Forbidden(AccountError):
    code = "forbidden"
    status_code = 403
    message = "You may only modify your own account."


class AuthError(Exception):
    """A bearer token could not be accepted."""

    code = "invalid_token"
    message = "Invalid token."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class TokenInvalid(AuthError):
    """Bad signature, malformed token, or unusable subject claim."""


class TokenExpired(AuthError):
    code = "token_expired"
    message = "Token has expired."
