# services/scheduling-service/src/apps/core/models/history.py
"""
Flight History Model

Append-only record of booking changes.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from django.utils import timezone

from ..constants import HistoryAction


@dataclass(frozen=True)
class HistoryEvent:
    """One change to a booking, with the old/new values that changed."""
    flight_id: uuid.UUID
    action: HistoryAction
    changed_by: str
    changes: Dict[str, Any] = field(default_factory=dict)
    notes: str = ''
    timestamp: datetime = field(default_factory=timezone.now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
