"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and account
operations do the work; these only own the domain shape.

Layer rule: no imports from api/ or activity/.
"""

from __future__ import annotations

from dataclasses import dataclass

# Profile fields a user may change through the self-service update path.
# Email and password are deliberately absent.
PROFILE_FIELDS: tuple[str, ...] = ("contact", "bio", "mail", "qualification", "location", "profile_image")


@dataclass
class User:
    """A registered account.

    role is free text ("student", "admin", ...). Only "admin" carries meaning:
    it allows modifying or deleting other accounts.

    hashed_password is a bcrypt digest with the salt and cost embedded.
    profile_image holds a public reference such as "/uploads/1700000000-me.png".

    id is None before the record is written to the database.
    """

    name: str
    email: str
    role: str
    hashed_password: str
    id: int | None = None
    contact: str | None = None
    bio: str | None = None
    mail: str | None = None
    qualification: str | None = None
    location: str | None = None
    profile_image: str | None = None
    registration_date: str = ""  # ISO 8601, set by store on insert
    created_at: str = ""
    updated_at: str = ""
    last_login: str | None = None
