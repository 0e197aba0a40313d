"""
activity/models.py -- Domain dataclass for audit log entries.

Records are never updated or deleted -- only inserted. user_id is a weak
reference: it may point at an account that has since been deleted, and the
"was deleted" entry itself always does.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Activity:
    description: str
    user_id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    id: Optional[int] = None
