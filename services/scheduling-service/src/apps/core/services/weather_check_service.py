# services/scheduling-service/src/apps/core/services/weather_check_service.py
"""
Weather Check Service

Runs weather checks for bookings and applies the resulting verdicts.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone

from ..constants import BookingStatus
from ..events import EventPublisher, publish_history_event
from ..models.booking import Booking
from ..models.history import HistoryEvent
from ..models.weather import SafetyVerdict
from .exceptions import SchedulingError
from .safety_evaluator import SafetyEvaluator
from .state_machine import BookingStateMachine

logger = logging.getLogger(__name__)


@dataclass
class WeatherCheckResult:
    """Outcome of checking one booking."""
    booking_id: Any
    status: BookingStatus
    verdict: Optional[SafetyVerdict] = None
    event: Optional[HistoryEvent] = None
    skipped: bool = False

    @property
    def changed(self) -> bool:
        return self.event is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'booking_id': str(self.booking_id),
            'status': self.status.value,
            'verdict': self.verdict.to_dict() if self.verdict else None,
            'changed': self.changed,
            'skipped': self.skipped,
        }


class WeatherCheckService:
    """
    Service for booking weather checks.

    Handles:
    - Single booking checks
    - Periodic sweeps over upcoming bookings
    - Notification events for status changes
    """

    def __init__(
        self,
        weather_source,
        evaluator: SafetyEvaluator,
        state_machine: BookingStateMachine = None,
        publisher: EventPublisher = None
    ):
        self.weather_source = weather_source
        self.evaluator = evaluator
        self.state_machine = state_machine or BookingStateMachine()
        self.publisher = publisher or EventPublisher()

    def check_booking(self, booking: Booking, at: datetime = None) -> WeatherCheckResult:
        """
        Check the weather for a booking and apply the verdict.

        Terminal bookings are skipped without fetching weather. A weather
        source failure propagates and leaves the booking unchanged.
        """
        if booking.is_terminal:
            logger.debug(f"Skipping weather check for {booking.status.value} booking {booking.id}")
            return WeatherCheckResult(booking_id=booking.id, status=booking.status, skipped=True)

        at = at or booking.scheduled_date
        samples = self.weather_source.get_fresh_route_conditions(booking.route, at)
        verdict = self.evaluator.evaluate_route(samples, booking.training_level)

        event = self.state_machine.apply_weather_verdict(booking, verdict)
        if event is not None:
            publish_history_event(
                booking,
                event,
                minima_description=self.evaluator.policy.describe(booking.training_level),
                publisher=self.publisher,
            )

        return WeatherCheckResult(
            booking_id=booking.id,
            status=booking.status,
            verdict=verdict,
            event=event,
        )

    def run_sweep(self, repository, now: datetime = None) -> Dict[str, int]:
        """
        Check every active booking inside the lookahead window.

        Each booking is checked under the repository lock and saved when its
        status changes. Errors for one booking are logged and counted.
        """
        now = now or timezone.now()
        lookahead = timedelta(hours=getattr(settings, 'WEATHER_CHECK_LOOKAHEAD_HOURS', 48))

        bookings = repository.list_upcoming(now, now + lookahead)
        stats = {'total': len(bookings), 'checked': 0, 'holds': 0, 'cleared': 0, 'errors': 0}

        logger.info(f"Running weather check for {len(bookings)} upcoming bookings")

        for candidate in bookings:
            try:
                with repository.lock(candidate.id):
                    booking = repository.get(candidate.id)
                    result = self.check_booking(booking)
                    if result.changed:
                        repository.save(booking)
            except SchedulingError as e:
                stats['errors'] += 1
                logger.error(
                    f"Weather check failed for booking {candidate.id}: {e.message}",
                    extra={'booking_id': str(candidate.id), 'error': e.kind.value if e.kind else None}
                )
                continue

            if result.skipped:
                continue
            stats['checked'] += 1
            if result.changed:
                if result.status == BookingStatus.WEATHER_HOLD:
                    stats['holds'] += 1
                else:
                    stats['cleared'] += 1

        logger.info(
            f"Weather check complete: {stats['checked']} checked, "
            f"{stats['holds']} holds, {stats['cleared']} cleared, {stats['errors']} errors"
        )
        return stats
