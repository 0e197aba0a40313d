"""
activity/store.py -- SQLAlchemy Core persistence for the activity log.

Pattern: Repository + Data Mapper (same as auth/store.py).

The table has no foreign key to users. Deleting an account must not cascade
into, or be blocked by, its audit trail.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from activity.models import Activity
from core.config import get_settings, now_iso
from core.database import make_engine

_metadata = MetaData()

_activities = Table(
    "activities",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("description", Text, nullable=False),
    Column("user_id", Integer),
    Column("created_at", String(32), nullable=False, index=True),
)


class ActivityStore:
    """Append-only repository for Activity entries.

    Usage:
        log = ActivityStore("sqlite:///:memory:")
        log.record("User Ada registered.", user_id=1)
        log.recent(5)   # newest first
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    def record(self, description: str, user_id: int | None = None) -> Activity:
        """Append one entry and return it with id and created_at filled in."""
        activity = Activity(description=description, user_id=user_id, created_at=now_iso())
        with self.engine.connect() as conn:
            result = conn.execute(
                _activities.insert().values(
                    description=activity.description,
                    user_id=activity.user_id,
                    created_at=activity.created_at,
                )
            )
            conn.commit()
            activity.id = result.inserted_primary_key[0]
        return activity

    def recent(self, limit: int = 5) -> list[Activity]:
        """Return the most recent entries, newest first.

        created_at has microsecond resolution but two writes in the same
        request can still collide, so id breaks ties.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(
                _activities.select()
                .order_by(_activities.c.created_at.desc(), _activities.c.id.desc())
                .limit(limit)
            ).fetchall()
        return [_row_to_activity(r) for r in rows]

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_activities)).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_activity(row) -> Activity:
    return Activity(
        id=row.id,
        description=row.description,
        user_id=row.user_id,
        created_at=row.created_at,
    )
