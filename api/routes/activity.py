"""
api/routes/activity.py -- Activity feed and system status endpoints.

Routes:
  GET  /activities      -- most recent activity entries, newest first
  GET  /status          -- current system status string
  POST /status/update   -- replace the status (empty value keeps the current one)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import ActivityResponse, StatusResponse, StatusUpdate, StatusUpdateResponse
from auth.accounts import AccountService
from auth.dependencies import get_accounts
from core.config import get_settings
from core.status import SystemStatus

router = APIRouter()


def get_system_status(request: Request) -> SystemStatus:
    return request.app.state.system_status


@router.get("/activities", response_model=list[ActivityResponse])
def recent_activities(accounts: AccountService = Depends(get_accounts)) -> list[ActivityResponse]:
    limit = get_settings().activity_feed_limit
    return [ActivityResponse.from_activity(a) for a in accounts.recent_activity(limit)]


@router.get("/status", response_model=StatusResponse)
def read_status(status: SystemStatus = Depends(get_system_status)) -> StatusResponse:
    return StatusResponse(status=status.get())


@router.post("/status/update", response_model=StatusUpdateResponse)
def update_status(
    body: StatusUpdate,
    status: SystemStatus = Depends(get_system_status),
) -> StatusUpdateResponse:
    return StatusUpdateResponse(message="System status updated.", status=status.set(body.status))
