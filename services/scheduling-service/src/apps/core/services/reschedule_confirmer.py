# services/scheduling-service/src/apps/core/services/reschedule_confirmer.py
"""
Reschedule Confirmer

Re-validates a selected reschedule candidate and commits it to the booking.
"""

import logging
from datetime import datetime

from django.utils import timezone

from ..constants import BookingStatus
from ..models.booking import Booking
from ..models.reschedule import RescheduleCandidate
from .exceptions import (
    BookingNotOnHoldError,
    CandidateNoLongerSafeError,
    InvalidTransitionError,
    TerminalBookingImmutableError,
)
from .safety_evaluator import SafetyEvaluator
from .state_machine import BookingStateMachine

logger = logging.getLogger(__name__)


class RescheduleConfirmer:
    """
    Commits an operator-selected candidate.

    Conditions may have changed since the candidate was generated, so the
    forecast for the candidate time is fetched and evaluated again before
    the booking is moved.
    """

    def __init__(
        self,
        weather_source,
        evaluator: SafetyEvaluator,
        state_machine: BookingStateMachine = None
    ):
        self.weather_source = weather_source
        self.evaluator = evaluator
        self.state_machine = state_machine or BookingStateMachine()

    def confirm(
        self,
        booking: Booking,
        candidate: RescheduleCandidate,
        actor: str = None,
        now: datetime = None
    ) -> Booking:
        """
        Move a held booking to the candidate time and confirm it.

        Raises:
            InvalidTransitionError: Candidate was generated for another booking
            TerminalBookingImmutableError: Booking is cancelled or completed
            BookingNotOnHoldError: Booking is not on weather hold
            CandidateNoLongerSafeError: Candidate time passed or is now unsafe
        """
        # 1. Candidate must belong to this booking
        if candidate.booking_id != booking.id:
            raise InvalidTransitionError(
                booking.status.value,
                BookingStatus.CONFIRMED.value,
                message=f"Candidate does not belong to booking {booking.id}",
                details={
                    'booking_id': str(booking.id),
                    'candidate_booking_id': str(candidate.booking_id),
                }
            )

        # 2. Booking must still be on hold
        if booking.is_terminal:
            raise TerminalBookingImmutableError(booking.id, booking.status.value)
        if not booking.is_on_hold:
            raise BookingNotOnHoldError(booking.id, booking.status.value)

        # 3. Candidate must still be in the future
        now = now or timezone.now()
        if candidate.date_time <= now:
            raise CandidateNoLongerSafeError(
                f"Candidate time {candidate.date_time.isoformat()} has already passed"
            )

        # 4. Re-validate against a fresh forecast
        samples = self.weather_source.get_fresh_route_conditions(
            booking.route, candidate.date_time
        )
        verdict = self.evaluator.evaluate_route(samples, booking.training_level)
        if not verdict.is_safe:
            logger.info(
                f"Reschedule candidate for booking {booking.id} no longer safe: {verdict.reason}"
            )
            raise CandidateNoLongerSafeError(
                f"Conditions at {candidate.date_time.isoformat()} no longer pass: "
                f"{verdict.reason}",
                verdict=verdict,
            )

        # 5. Commit
        self.state_machine.reschedule(
            booking,
            candidate.date_time,
            actor or self.state_machine.system_actor,
            reasoning=candidate.reasoning,
        )
        booking.latest_verdict = verdict

        logger.info(
            f"Confirmed reschedule of booking {booking.id} to {candidate.date_time.isoformat()}",
            extra={'booking_id': str(booking.id), 'priority': candidate.priority}
        )
        return booking
