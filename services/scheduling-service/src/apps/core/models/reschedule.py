# services/scheduling-service/src/apps/core/models/reschedule.py
"""
Reschedule Models

Forecast windows, participant availability, and ranked reschedule candidates.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List

from django.utils import timezone

from ..constants import ParticipantRole


def _require_aware(*values: datetime):
    if any(timezone.is_naive(value) for value in values):
        raise ValueError("Window bounds must be timezone-aware")


@dataclass(frozen=True)
class ForecastWindow:
    """Future period within which reschedule slots are searched."""
    start: datetime
    end: datetime

    def __post_init__(self):
        _require_aware(self.start, self.end)
        if self.end <= self.start:
            raise ValueError("Forecast window end must be after start")

    def clamp(self, horizon: timedelta) -> 'ForecastWindow':
        """Limit the window to ``horizon`` after its start."""
        limit = self.start + horizon
        if self.end <= limit:
            return self
        return ForecastWindow(start=self.start, end=limit)

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


@dataclass(frozen=True)
class AvailabilityWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        _require_aware(self.start, self.end)
        if self.end <= self.start:
            raise ValueError("Availability window end must be after start")

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


@dataclass(frozen=True)
class ParticipantAvailability:
    """
    Free/busy data for a student, instructor or aircraft.

    With no free windows declared the participant is free except where busy.
    """
    participant_id: uuid.UUID
    role: ParticipantRole
    free: List[AvailabilityWindow] = field(default_factory=list)
    busy: List[AvailabilityWindow] = field(default_factory=list)

    def is_available(self, start: datetime, end: datetime) -> bool:
        if any(window.overlaps(start, end) for window in self.busy):
            return False
        if not self.free:
            return True
        return any(window.contains(start, end) for window in self.free)


@dataclass(frozen=True)
class RescheduleCandidate:
    """Proposed alternative time for a booking on weather hold."""
    booking_id: uuid.UUID
    date_time: datetime
    reasoning: str
    weather_forecast: str
    priority: int
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'booking_id': str(self.booking_id),
            'date_time': self.date_time.isoformat(),
            'reasoning': self.reasoning,
            'weather_forecast': self.weather_forecast,
            'priority': self.priority,
            'confidence': self.confidence,
        }
