"""
API request and response models for eliteapp REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
separate from the dataclasses in auth/models.py and activity/models.py,
which own the internal domain representation. Route handlers map between
the two.

Request models validate at construction time: a mismatched password
confirmation or an over-long password never reaches the account layer.
Response models have no password field, so a hash cannot leak through
serialization.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from activity.models import Activity
from auth.models import User

# bcrypt only reads the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {_MAX_PASSWORD_BYTES} bytes.")
    return value


def _check_email(value: str) -> str:
    normalized = value.strip().lower()
    local, _, domain = normalized.partition("@")
    if not local or not domain:
        raise ValueError("A valid email address is required.")
    return normalized


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /signup."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    role: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    confirm_password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class ProfileUpdate(BaseModel):
    """Self-service profile fields for PUT /user/update.

    Built from multipart form fields by the route. None means "leave as is".
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    contact: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    mail: Optional[str] = Field(default=None, max_length=255)
    qualification: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)


class AdminUserUpdate(ProfileUpdate):
    """Request body for PUT /users/{id}.

    current_password is the target account's password, required even when
    the caller is an admin.
    """

    current_password: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    role: Optional[str] = Field(default=None, min_length=1, max_length=50)
    password: Optional[str] = Field(default=None, min_length=1)
    profile_image: Optional[str] = Field(default=None, max_length=512)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return _check_email(value) if value is not None else None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value) if value is not None else None


class StatusUpdate(BaseModel):
    """Request body for POST /status/update. An empty or missing status keeps the current one."""

    status: Optional[str] = Field(default=None, max_length=100)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of an account. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    role: str
    contact: Optional[str] = None
    bio: Optional[str] = None
    mail: Optional[str] = None
    qualification: Optional[str] = None
    location: Optional[str] = None
    profile_image: Optional[str] = None
    registration_date: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build a UserResponse from an auth.models.User, dropping the hash."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            contact=user.contact,
            bio=user.bio,
            mail=user.mail,
            qualification=user.qualification,
            location=user.location,
            profile_image=user.profile_image,
            registration_date=user.registration_date,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: int
    role: str


class ActivityResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    description: str
    user_id: Optional[int]
    created_at: str

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            description=activity.description,
            user_id=activity.user_id,
            created_at=activity.created_at,
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class StatusResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str


class StatusUpdateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    status: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail
