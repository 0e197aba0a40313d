"""
auth/accounts.py -- Account operations: signup, login, logout, update, delete.

Every operation that changes who a user is, or proves who they are, appends
one entry to the activity log. Failures are raised as AccountError
subclasses (auth/errors.py) so the HTTP layer can report each one with its
own status code; infrastructure errors (SQLAlchemyError and friends) are not
caught here and end up in the generic 500 handler.

Account lifecycle:
  NonExistent -> Registered -> (Updated)* -> Deleted

Cross-account mutation (PUT/DELETE /users/{id}) requires the caller to be the
target or hold the "admin" role. The target's current password is still
required for updates, as before the ownership check existed.

The admin role cannot be self-granted: signup refuses it and only an existing
admin may change any account's role. The first admin is provisioned directly
through UserStore.

Layer rule: no imports from api/. Input validation (password confirmation,
field lengths) is done by the request models before these methods run.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from activity.models import Activity
from activity.store import ActivityStore
from auth.errors import Conflict, Forbidden, InvalidCredentials, NotFound
from auth.models import PROFILE_FIELDS, User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password, verify_password

logger = logging.getLogger("eliteapp.accounts")

ADMIN_ROLE = "admin"

# Fields an owner or admin may set through the administrative update path,
# in addition to the password (handled separately so it gets hashed).
ADMIN_UPDATABLE: tuple[str, ...] = ("name", "email", "role") + PROFILE_FIELDS


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _is_admin_role(role: str) -> bool:
    return role.strip().lower() == ADMIN_ROLE


class AccountService:
    """Orchestrates the credential store, password hashing, tokens and the activity log.

    Usage:
        accounts = AccountService(UserStore(), ActivityStore())
        accounts.signup("Ada", "ada@example.com", "student", "s3cret!")
        token, user = accounts.login("ada@example.com", "s3cret!")
    """

    def __init__(self, users: UserStore, activities: ActivityStore) -> None:
        self.users = users
        self.activities = activities

    # ------------------------------------------------------------------
    # Registration and sessions
    # ------------------------------------------------------------------

    def signup(self, name: str, email: str, role: str, password: str) -> User:
        """Create an account. No token is issued; the caller logs in separately.

        Raises Conflict if the email is already registered and Forbidden if
        the requested role is the admin role.
        """
        if _is_admin_role(role):
            raise Forbidden("The admin role cannot be self-assigned.")
        email = normalize_email(email)
        if self.users.get_by_email(email) is not None:
            raise Conflict()

        user = User(name=name, email=email, role=role, hashed_password=hash_password(password))
        try:
            user_id = self.users.create_user(user)
        except IntegrityError as exc:
            # Concurrent signup with the same email won the race.
            raise Conflict() from exc

        self.activities.record(f"User {name} registered.", user_id=user_id)
        logger.info("Registered user id=%d role=%s", user_id, role)
        return self.get_user(user_id)

    def login(self, email: str, password: str) -> tuple[str, User]:
        """Verify credentials and return (token, user).

        Raises NotFound for an unknown email and InvalidCredentials for a
        wrong password. Nothing is written on failure.
        """
        user = self.users.get_by_email(normalize_email(email))
        if user is None:
            raise NotFound()
        if not verify_password(password, user.hashed_password):
            logger.warning("Failed login for user id=%d", user.id)
            raise InvalidCredentials()

        token = create_access_token(user.id)
        self.users.update_last_login(user.id)
        self.activities.record(f"User {user.name} logged in.", user_id=user.id)
        logger.info("User id=%d logged in", user.id)
        return token, user

    def logout(self, user_id: int) -> Activity:
        """Record a logout. Tokens are not revoked; this is an audit event only."""
        user = self.users.get_by_id(user_id)
        label = user.name if user is not None else f"#{user_id}"
        return self.activities.record(f"User {label} logged out.", user_id=user_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def recent_activity(self, limit: int) -> list[Activity]:
        return self.activities.recent(limit)

    # ------------------------------------------------------------------
    # Updates and deletion
    # ------------------------------------------------------------------

    def update_profile(self, user_id: int, **fields) -> User:
        """Self-service update of profile fields only.

        Fields passed as None are left unchanged. Email and password cannot be
        changed here; passing them is a programming error (ValueError).
        """
        disallowed = set(fields) - set(PROFILE_FIELDS)
        if disallowed:
            raise ValueError(f"Not a profile field: {sorted(disallowed)!r}")

        user = self.get_user(user_id)
        changes = {k: v for k, v in fields.items() if v is not None}
        if changes:
            self.users.update_user(user_id, **changes)
        self.activities.record(f"User {user.name} updated their profile.", user_id=user_id)
        return self.get_user(user_id)

    def admin_update(
        self,
        caller_id: int,
        target_id: int,
        current_password: str,
        password: str | None = None,
        **fields,
    ) -> User:
        """Update any account field after checking authorization and the target's password.

        Raises NotFound, Forbidden, InvalidCredentials or Conflict (new email
        already in use by another account).
        """
        disallowed = set(fields) - set(ADMIN_UPDATABLE)
        if disallowed:
            raise ValueError(f"Not an updatable field: {sorted(disallowed)!r}")

        target = self.get_user(target_id)
        self._authorize(caller_id, target)
        if not verify_password(current_password, target.hashed_password):
            raise InvalidCredentials("Incorrect current password.")

        changes = {k: v for k, v in fields.items() if v is not None}
        if "role" in changes and changes["role"] != target.role and not self._is_admin(caller_id):
            raise Forbidden("Only an admin can change roles.")
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            owner = self.users.get_by_email(changes["email"])
            if owner is not None and owner.id != target_id:
                raise Conflict()
        if password:
            changes["hashed_password"] = hash_password(password)

        if changes:
            try:
                self.users.update_user(target_id, **changes)
            except IntegrityError as exc:
                raise Conflict() from exc

        updated = self.get_user(target_id)
        self.activities.record(f"User {updated.name} updated their profile.", user_id=target_id)
        return updated

    def delete(self, caller_id: int, target_id: int) -> User:
        """Remove an account and log it. The log entry keeps the now-dangling id."""
        target = self.get_user(target_id)
        self._authorize(caller_id, target)

        deleted = self.users.delete_user(target_id)
        if deleted is None:
            # Removed by a concurrent request between the lookup and the delete.
            raise NotFound()
        self.activities.record(f"User {deleted.name} was deleted.", user_id=deleted.id)
        logger.info("User id=%d deleted by user id=%d", target_id, caller_id)
        return deleted

    def _is_admin(self, user_id: int) -> bool:
        caller = self.users.get_by_id(user_id)
        return caller is not None and caller.role == ADMIN_ROLE

    def _authorize(self, caller_id: int, target: User) -> None:
        if caller_id != target.id and not self._is_admin(caller_id):
            raise Forbidden()
