"""Unit tests for auth/accounts.py -- AccountService.

Every test gets a fresh service over in-memory stores (the `service` fixture
in conftest.py). Covers the account lifecycle, the error each operation
raises, and the activity entry each success writes.
"""

import pytest

from auth.accounts import AccountService
from auth.errors import Conflict, Forbidden, InvalidCredentials, NotFound
from auth.models import User
from auth.tokens import hash_password, verify_access_token, verify_password

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _signup(service: AccountService, email: str = "ada@example.com", role: str = "student", name: str = "Ada"):
    return service.signup(name, email, role, "pw-" + email)


def _admin(service: AccountService) -> User:
    """Provision an admin directly in the store; signup refuses the admin role."""
    uid = service.users.create_user(
        User(name="Root", email="root@example.com", role="admin", hashed_password=hash_password("pw-root@example.com"))
    )
    return service.get_user(uid)


def _descriptions(service: AccountService) -> list[str]:
    return [a.description for a in service.recent_activity(100)]


# ---------------------------------------------------------------------------
# Signup and login
# ---------------------------------------------------------------------------


class TestSignup:
    def test_signup_then_login_succeeds(self, service: AccountService) -> None:
        user = service.signup("Ada", "ada@example.com", "student", "s3cret!")
        token, logged_in = service.login("ada@example.com", "s3cret!")
        assert logged_in.id == user.id
        assert verify_access_token(token) == user.id

    def test_signup_stores_hash_not_plaintext(self, service: AccountService) -> None:
        user = service.signup("Ada", "ada@example.com", "student", "s3cret!")
        assert user.hashed_password != "s3cret!"
        assert verify_password("s3cret!", user.hashed_password)

    def test_signup_records_activity(self, service: AccountService) -> None:
        user = _signup(service)
        latest = service.recent_activity(1)[0]
        assert latest.description == "User Ada registered."
        assert latest.user_id == user.id

    def test_email_is_normalized(self, service: AccountService) -> None:
        user = service.signup("Ada", "  Ada@Example.COM ", "student", "pw")
        assert user.email == "ada@example.com"
        service.login("ADA@example.com", "pw")

    def test_duplicate_email_conflicts_and_first_is_unaffected(self, service: AccountService) -> None:
        first = _signup(service)
        with pytest.raises(Conflict):
            service.signup("Impostor", "ada@example.com", "admin", "other")
        stored = service.get_user(first.id)
        assert stored.name == "Ada"
        assert stored.role == "student"
        assert stored.hashed_password == first.hashed_password
        assert len(service.list_users()) == 1
        assert _descriptions(service) == ["User Ada registered."]

    def test_role_is_free_text(self, service: AccountService) -> None:
        assert _signup(service, role="teaching-assistant").role == "teaching-assistant"

    @pytest.mark.parametrize("role", ["admin", "Admin", " admin "])
    def test_admin_role_cannot_be_self_assigned(self, service: AccountService, role: str) -> None:
        with pytest.raises(Forbidden):
            service.signup("Mallory", "mallory@example.com", role, "pw")
        assert service.list_users() == []
        assert _descriptions(service) == []


class TestLogin:
    def test_unknown_email_is_not_found(self, service: AccountService) -> None:
        with pytest.raises(NotFound):
            service.login("ghost@example.com", "whatever")

    def test_wrong_password_is_invalid_credentials(self, service: AccountService) -> None:
        user = _signup(service)
        before = _descriptions(service)
        with pytest.raises(InvalidCredentials):
            service.login("ada@example.com", "wrong")
        after = service.get_user(user.id)
        assert after.hashed_password == user.hashed_password
        assert after.last_login is None
        assert _descriptions(service) == before

    def test_login_records_activity_and_last_login(self, service: AccountService) -> None:
        user = _signup(service)
        service.login("ada@example.com", "pw-ada@example.com")
        assert service.recent_activity(1)[0].description == "User Ada logged in."
        assert service.get_user(user.id).last_login


class TestLogout:
    def test_logout_records_activity(self, service: AccountService) -> None:
        user = _signup(service)
        entry = service.logout(user.id)
        assert entry.description == "User Ada logged out."
        assert entry.user_id == user.id

    def test_logout_after_account_deleted_still_succeeds(self, service: AccountService) -> None:
        user = _signup(service)
        service.delete(user.id, user.id)
        entry = service.logout(user.id)
        assert entry.description == f"User #{user.id} logged out."


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


class TestProfileUpdate:
    def test_updates_only_given_fields(self, service: AccountService) -> None:
        user = _signup(service)
        service.update_profile(user.id, bio="Analyst", location="London")
        updated = service.update_profile(user.id, contact="555-0100", bio=None)
        assert updated.bio == "Analyst"
        assert updated.location == "London"
        assert updated.contact == "555-0100"

    def test_cannot_change_email_or_password(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(ValueError):
            service.update_profile(user.id, email="new@example.com")
        with pytest.raises(ValueError):
            service.update_profile(user.id, hashed_password="x")

    def test_missing_user_is_not_found(self, service: AccountService) -> None:
        with pytest.raises(NotFound):
            service.update_profile(404, bio="x")

    def test_records_activity(self, service: AccountService) -> None:
        user = _signup(service)
        service.update_profile(user.id, bio="x")
        assert service.recent_activity(1)[0].description == "User Ada updated their profile."


class TestAdminUpdate:
    def test_owner_can_change_password_with_current_password(self, service: AccountService) -> None:
        user = _signup(service)
        service.admin_update(user.id, user.id, "pw-ada@example.com", password="new-password")
        service.login("ada@example.com", "new-password")
        with pytest.raises(InvalidCredentials):
            service.login("ada@example.com", "pw-ada@example.com")

    def test_wrong_current_password_changes_nothing(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(InvalidCredentials):
            service.admin_update(user.id, user.id, "wrong", name="Changed")
        assert service.get_user(user.id).name == "Ada"

    def test_other_non_admin_is_forbidden(self, service: AccountService) -> None:
        victim = _signup(service)
        attacker = _signup(service, email="eve@example.com", name="Eve")
        with pytest.raises(Forbidden):
            service.admin_update(attacker.id, victim.id, "pw-ada@example.com", role="admin")
        assert service.get_user(victim.id).role == "student"

    def test_admin_can_update_other_account_with_its_password(self, service: AccountService) -> None:
        admin = _admin(service)
        user = _signup(service)
        updated = service.admin_update(admin.id, user.id, "pw-ada@example.com", role="mentor", bio="Promoted")
        assert updated.role == "mentor"
        assert updated.bio == "Promoted"

    def test_admin_still_needs_target_password(self, service: AccountService) -> None:
        admin = _admin(service)
        user = _signup(service)
        with pytest.raises(InvalidCredentials):
            service.admin_update(admin.id, user.id, "pw-root@example.com", role="mentor")

    def test_owner_cannot_promote_themselves(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(Forbidden):
            service.admin_update(user.id, user.id, "pw-ada@example.com", role="admin")
        assert service.get_user(user.id).role == "student"

    def test_owner_cannot_change_own_role_at_all(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(Forbidden):
            service.admin_update(user.id, user.id, "pw-ada@example.com", role="mentor")

    def test_resending_current_role_is_allowed(self, service: AccountService) -> None:
        user = _signup(service)
        updated = service.admin_update(user.id, user.id, "pw-ada@example.com", role="student", bio="Same role")
        assert updated.role == "student"
        assert updated.bio == "Same role"

    def test_admin_can_grant_admin_role(self, service: AccountService) -> None:
        admin = _admin(service)
        user = _signup(service)
        assert service.admin_update(admin.id, user.id, "pw-ada@example.com", role="admin").role == "admin"
        other = _signup(service, email="grace@example.com", name="Grace")
        service.delete(user.id, other.id)
        assert [u.id for u in service.list_users()] == [admin.id, user.id]

    def test_email_taken_by_other_account_conflicts(self, service: AccountService) -> None:
        _signup(service, email="taken@example.com", name="Taken")
        user = _signup(service)
        with pytest.raises(Conflict):
            service.admin_update(user.id, user.id, "pw-ada@example.com", email="Taken@example.com")

    def test_keeping_own_email_is_not_a_conflict(self, service: AccountService) -> None:
        user = _signup(service)
        updated = service.admin_update(user.id, user.id, "pw-ada@example.com", email="ada@example.com", name="Ada L.")
        assert updated.name == "Ada L."

    def test_missing_target_is_not_found(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(NotFound):
            service.admin_update(user.id, 999, "pw")

    def test_records_activity_with_new_name(self, service: AccountService) -> None:
        user = _signup(service)
        service.admin_update(user.id, user.id, "pw-ada@example.com", name="Ada Lovelace")
        assert service.recent_activity(1)[0].description == "User Ada Lovelace updated their profile."


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


class TestDelete:
    def test_delete_leaves_dangling_activity_reference(self, service: AccountService) -> None:
        user = _signup(service)
        service.delete(user.id, user.id)
        latest = service.recent_activity(1)[0]
        assert latest.description == "User Ada was deleted."
        assert latest.user_id == user.id
        with pytest.raises(NotFound):
            service.get_user(latest.user_id)

    def test_delete_missing_is_not_found(self, service: AccountService) -> None:
        user = _signup(service)
        with pytest.raises(NotFound):
            service.delete(user.id, 999)

    def test_non_admin_cannot_delete_others(self, service: AccountService) -> None:
        victim = _signup(service)
        attacker = _signup(service, email="eve@example.com", name="Eve")
        with pytest.raises(Forbidden):
            service.delete(attacker.id, victim.id)
        assert service.get_user(victim.id).name == "Ada"

    def test_admin_can_delete_others(self, service: AccountService) -> None:
        admin = _admin(service)
        user = _signup(service)
        service.delete(admin.id, user.id)
        assert [u.id for u in service.list_users()] == [admin.id]

    def test_deleted_caller_loses_admin_rights(self, service: AccountService) -> None:
        admin = _admin(service)
        user = _signup(service)
        service.delete(admin.id, admin.id)
        with pytest.raises(Forbidden):
            service.delete(admin.id, user.id)
