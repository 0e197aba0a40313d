"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one credential is accepted: an "Authorization: Bearer <token>" header
carrying a JWT from POST /login.

get_current_user_id() is the auth gate. It verifies the token and nothing
else: a token stays usable after its account is deleted, until it expires.
get_current_user() wraps it and loads the account record.

A missing header or a rejected token raises HTTP 401 before the route
handler runs, so a protected handler never executes for an anonymous
caller. Errors other than AuthError (e.g. a misconfigured secret) propagate
to the generic 500 handler in api/main.py.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.accounts import AccountService
from auth.errors import AuthError
from auth.models import User
from auth.tokens import verify_access_token

_BEARER_PREFIX = "Bearer "


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def bearer_token(request: Request) -> str | None:
    """Return the token from the Authorization header, or None if absent or not Bearer."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(_BEARER_PREFIX):
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_user_id(request: Request) -> int:
    """Require a valid bearer token. Returns the user id and stores it on request.state.

    Use as a FastAPI dependency:
        @router.post("/logout")
        def route(user_id: int = Depends(get_current_user_id)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise _unauthorized("unauthorized", "No token, authorization denied.")
    try:
        user_id = verify_access_token(token)
    except AuthError as exc:
        raise _unauthorized(exc.code, exc.message) from exc
    request.state.user_id = user_id
    return user_id


def get_current_user(request: Request) -> User:
    """Require a valid bearer token and return the account it was issued for.

    Raises HTTP 404 (via NotFound) if the account was deleted after the
    token was issued.
    """
    user_id = get_current_user_id(request)
    return get_accounts(request).get_user(user_id)


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts
