"""
auth/store.py -- SQLAlchemy Core persistence layer for user records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Route and account
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The password hash never leaves this layer except inside a User dataclass;
  API response models have no field for it.

Email uniqueness is enforced twice: callers look up the email first for a
clear error, and the UNIQUE constraint catches the race where two inserts
pass that lookup together (IntegrityError propagates to the caller).

Layer rule: no imports from api/ or activity/.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, text
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import get_settings, now_iso
from core.database import make_engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("role", String(50), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("contact", String(255)),
    Column("bio", Text),
    Column("mail", String(255)),
    Column("qualification", String(255)),
    Column("location", String(255)),
    Column("profile_image", String(512)),
    Column("registration_date", String(32), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Column("last_login", String(32)),
)

# Columns update_user() accepts. Anything else is a programming error.
_UPDATABLE = frozenset(
    {
        "name",
        "email",
        "role",
        "hashed_password",
        "contact",
        "bio",
        "mail",
        "qualification",
        "location",
        "profile_image",
    }
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///:memory:")
        uid = store.create_user(User(name="Ada", email="ada@example.com", role="admin",
                                     hashed_password=hash_password("secret")))
        user = store.get_by_email("ada@example.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        stamp = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    name=user.name,
                    email=user.email,
                    role=user.role,
                    hashed_password=user.hashed_password,
                    contact=user.contact,
                    bio=user.bio,
                    mail=user.mail,
                    qualification=user.qualification,
                    location=user.location,
                    profile_image=user.profile_image,
                    registration_date=user.registration_date or stamp,
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Callers normalize case before calling."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in registration order."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, user_id: int, **fields) -> bool:
        """Update mutable fields on an existing user and bump updated_at.

        Returns True if a row was updated, False if user_id was not found.
        Raises ValueError for unknown field names and IntegrityError when a
        new email collides with another account.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(**fields, updated_at=now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def update_last_login(self, user_id: int) -> None:
        """Stamp the current UTC timestamp as last_login for the given user."""
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=now_iso()))
            conn.commit()

    def delete_user(self, user_id: int) -> User | None:
        """Permanently delete a user record and return it, or None if not found.

        Activity rows referencing the id are left in place.
        """
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
            if row is None:
                return None
            conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return _row_to_user(row)

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        hashed_password=row.hashed_password,
        contact=row.contact,
        bio=row.bio,
        mail=row.mail,
        qualification=row.qualification,
        location=row.location,
        profile_image=row.profile_image,
        registration_date=row.registration_date,
        created_at=row.created_at,
        updated_at=row.updated_at,
        last_login=row.last_login,
    )
