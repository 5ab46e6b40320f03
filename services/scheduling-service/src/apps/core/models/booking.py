# services/scheduling-service/src/apps/core/models/booking.py
"""
Booking Model

Flight training reservation as seen by the scheduling core. Persistence is
owned by the calling service; the core only mutates status and schedule.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..constants import (
    BookingStatus,
    FlightType,
    TrainingLevel,
    TERMINAL_STATUSES,
)
from .history import HistoryEvent
from .weather import Location, SafetyVerdict


@dataclass
class Booking:
    """
    Booking of a student, instructor and aircraft for one flight.

    ``training_level`` is the student's level at the time the booking was
    loaded. ``history`` collects the events produced by the current unit of
    work; ``version`` is the persisted revision used for optimistic locking.
    """
    student_id: uuid.UUID
    instructor_id: uuid.UUID
    aircraft_id: uuid.UUID
    scheduled_date: datetime
    departure_location: Location
    training_level: TrainingLevel
    destination_location: Optional[Location] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    flight_type: FlightType = FlightType.TRAINING
    notes: str = ''
    latest_verdict: Optional[SafetyVerdict] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    version: int = 0
    history: List[HistoryEvent] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_on_hold(self) -> bool:
        return self.status == BookingStatus.WEATHER_HOLD

    @property
    def route(self) -> List[Location]:
        """Departure first, then the destination when there is one."""
        locations = [self.departure_location]
        if self.destination_location is not None:
            locations.append(self.destination_location)
        return locations

    def __str__(self):
        return f"Booking {self.id} ({self.status.value} {self.scheduled_date:%Y-%m-%d %H:%M})"
