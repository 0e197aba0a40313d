"""
api/routes/users.py -- Account listing and cross-account management.

Routes:
  GET    /users        -- list all accounts (public, no password hashes)
  PUT    /users/{id}   -- update any field of an account (requires auth)
  DELETE /users/{id}   -- delete an account (requires auth)

Authorization for PUT/DELETE: the caller must be the target account or hold
the "admin" role (403 otherwise). PUT additionally requires the target's
current password. Both checks live in AccountService.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.models import AdminUserUpdate, UserResponse
from auth.accounts import AccountService
from auth.dependencies import get_accounts, get_current_user_id

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(accounts: AccountService = Depends(get_accounts)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in accounts.list_users()]


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: AdminUserUpdate,
    caller_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_accounts),
) -> UserResponse:
    """Update an account after verifying the caller's authority and the target's password."""
    fields = body.model_dump(exclude={"current_password", "password"})
    user = accounts.admin_update(
        caller_id,
        user_id,
        body.current_password,
        password=body.password,
        **fields,
    )
    return UserResponse.from_user(user)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    caller_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_accounts),
) -> Response:
    """Delete an account. The activity log keeps an entry pointing at the removed id."""
    accounts.delete(caller_id, user_id)
    return Response(status_code=204)
