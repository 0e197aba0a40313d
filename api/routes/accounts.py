"""
api/routes/accounts.py -- Registration, session and self-service profile endpoints.

Routes:
  POST /signup        -- create an account; no token is issued
  POST /login         -- email/password login; returns a bearer token
  POST /logout        -- record a logout (requires auth; tokens are not revoked)
  GET  /user/me       -- current account (requires auth)
  PUT  /user/update   -- update own profile fields, optional image upload (requires auth)

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit).
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, LoginResponse, MessageResponse, ProfileUpdate, SignupRequest, UserResponse
from auth.accounts import AccountService
from auth.dependencies import get_accounts, get_current_user, get_current_user_id
from auth.models import User
from core.config import get_settings
from core.uploads import InvalidUpload, save_profile_image

# Auth policy:
# - POST /signup:       public
# - POST /login:        public, rate limited
# - POST /logout:       requires auth (get_current_user_id)
# - GET  /user/me:      requires auth (get_current_user)
# - PUT  /user/update:  requires auth (get_current_user_id)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=UserResponse, status_code=201)
def signup(body: SignupRequest, accounts: AccountService = Depends(get_accounts)) -> UserResponse:
    """Register a new account. Password confirmation is checked by SignupRequest."""
    user = accounts.signup(body.name, body.email, body.role, body.password)
    return UserResponse.from_user(user)


@limiter.limit(login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password and return a bearer token plus the account role."""
    accounts = get_accounts(request)
    token, user = accounts.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            expires_in=get_settings().token_expire_seconds,
            role=user.role,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
def logout(
    user_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_accounts),
) -> MessageResponse:
    """Record the logout in the activity log. The token itself stays valid until it expires."""
    accounts.logout(user_id)
    return MessageResponse(message="Logged out successfully.")


@router.get("/user/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_user(current_user)


@router.put("/user/update", response_model=UserResponse)
async def update_profile(
    user_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_accounts),
    contact: Optional[str] = Form(default=None),
    bio: Optional[str] = Form(default=None),
    mail: Optional[str] = Form(default=None),
    qualification: Optional[str] = Form(default=None),
    location: Optional[str] = Form(default=None),
    profile_image: Optional[UploadFile] = File(default=None),  # noqa: B008
) -> UserResponse:
    """Update the caller's own profile fields from a multipart form.

    Email and password are not accepted here; use PUT /users/{id}.
    """
    try:
        fields = ProfileUpdate(
            contact=contact,
            bio=bio,
            mail=mail,
            qualification=qualification,
            location=location,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": "validation_error", "message": "Request validation failed.", "detail": str(exc.errors())},
        ) from exc

    changes = fields.model_dump()
    if profile_image is not None and profile_image.filename:
        # Deleted accounts with a still-valid token must not leave files behind.
        accounts.get_user(user_id)
        settings = get_settings()
        data = await profile_image.read(settings.max_upload_bytes + 1)
        try:
            changes["profile_image"] = save_profile_image(data, profile_image.filename, profile_image.content_type)
        except InvalidUpload as exc:
            raise HTTPException(
                status_code=400,
                detail={"code": "validation_error", "message": str(exc)},
            ) from exc

    user = accounts.update_profile(user_id, **changes)
    return UserResponse.from_user(user)
