# services/scheduling-service/src/apps/core/services/reschedule_service.py
"""
Reschedule Service

Reschedule workflow for bookings on weather hold, from option generation
to the confirmed move.
"""

import logging
from datetime import datetime
from typing import List, Sequence
from uuid import UUID

from ..events import EventPublisher, publish_history_event, publish_reschedule_options
from ..models.booking import Booking
from ..models.reschedule import (
    ForecastWindow,
    ParticipantAvailability,
    RescheduleCandidate,
)
from .reschedule_confirmer import RescheduleConfirmer
from .reschedule_engine import RescheduleEngine

logger = logging.getLogger(__name__)


class RescheduleService:
    """
    Service for rescheduling held bookings.

    Handles:
    - Option generation and the options notification
    - Confirmation of a selected option under the booking lock
    - Persisting the move and the rescheduled notification
    """

    def __init__(
        self,
        repository,
        engine: RescheduleEngine,
        confirmer: RescheduleConfirmer,
        publisher: EventPublisher = None
    ):
        self.repository = repository
        self.engine = engine
        self.confirmer = confirmer
        self.publisher = publisher or EventPublisher()

    def request_options(
        self,
        booking_id: UUID,
        forecast_window: ForecastWindow,
        participant_availability: Sequence[ParticipantAvailability] = (),
        now: datetime = None
    ) -> List[RescheduleCandidate]:
        """
        Generate options for a held booking and notify its participants.

        The booking is read without the lock; nothing is written.
        """
        booking = self.repository.get(booking_id)
        candidates = self.engine.generate_options(
            booking,
            forecast_window,
            participant_availability,
            now=now,
        )

        publish_reschedule_options(booking, candidates, publisher=self.publisher)
        return candidates

    def confirm_option(
        self,
        booking_id: UUID,
        candidate: RescheduleCandidate,
        actor: str = None,
        now: datetime = None
    ) -> Booking:
        """
        Move a held booking to the selected option.

        Raises:
            BookingNotFoundError: Unknown booking
            CandidateNoLongerSafeError: Option failed re-validation
            ConcurrentModificationError: Booking changed while confirming
        """
        with self.repository.lock(booking_id):
            booking = self.repository.get(booking_id)
            self.confirmer.confirm(booking, candidate, actor=actor, now=now)
            event = booking.history[-1]
            self.repository.save(booking)

        logger.info(
            f"Booking {booking.id} moved to {booking.scheduled_date.isoformat()} "
            f"at version {booking.version}",
            extra={'booking_id': str(booking.id), 'history_event_id': str(event.id)}
        )
        publish_history_event(booking, event, publisher=self.publisher)
        return booking
