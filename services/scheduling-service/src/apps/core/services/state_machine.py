# services/scheduling-service/src/apps/core/services/state_machine.py
"""
Booking State Machine

Owns a booking's status field and its legal transitions. Every transition
records exactly one history event; persistence is left to the caller.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from django.conf import settings

from ..constants import BookingStatus, HistoryAction
from ..models.booking import Booking
from ..models.history import HistoryEvent
from ..models.weather import SafetyVerdict
from .exceptions import (
    BookingNotOnHoldError,
    InvalidTransitionError,
    TerminalBookingImmutableError,
)

logger = logging.getLogger(__name__)


class BookingStateMachine:
    """
    Status lifecycle for bookings.

    CONFIRMED <-> WEATHER_HOLD driven by weather verdicts, CANCELLED and
    COMPLETED are terminal. Weather checks on terminal bookings are ignored.
    """

    TRANSITIONS = {
        BookingStatus.CONFIRMED: {
            BookingStatus.WEATHER_HOLD,
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
        },
        BookingStatus.WEATHER_HOLD: {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        },
        BookingStatus.CANCELLED: set(),
        BookingStatus.COMPLETED: set(),
    }

    def __init__(self, system_actor: str = None):
        self.system_actor = system_actor or getattr(
            settings, 'SCHEDULING_SYSTEM_ACTOR', 'system'
        )

    def can_transition(self, current: BookingStatus, target: BookingStatus) -> bool:
        return target in self.TRANSITIONS.get(current, set())

    # ==========================================================================
    # Weather
    # ==========================================================================

    def apply_weather_verdict(
        self,
        booking: Booking,
        verdict: SafetyVerdict,
        actor: str = None
    ) -> Optional[HistoryEvent]:
        """
        Apply a weather verdict to a booking.

        Returns the recorded history event, or None when the status does not
        change. Terminal bookings are left untouched and the verdict is not
        attached to them.
        """
        if booking.is_terminal:
            logger.debug(
                f"Ignoring weather verdict for {booking.status.value} booking {booking.id}"
            )
            return None

        booking.latest_verdict = verdict
        actor = actor or self.system_actor

        if verdict.is_safe and booking.status == BookingStatus.WEATHER_HOLD:
            event = self._transition(
                booking,
                BookingStatus.CONFIRMED,
                HistoryAction.STATUS_CHANGED,
                actor,
                notes="Weather conditions cleared",
            )
            logger.info(f"Booking {booking.id} cleared from weather hold")
            return event

        if not verdict.is_safe and booking.status == BookingStatus.CONFIRMED:
            event = self._transition(
                booking,
                BookingStatus.WEATHER_HOLD,
                HistoryAction.STATUS_CHANGED,
                actor,
                notes=verdict.reason,
                extra_changes={
                    'violations': [code.value for code in verdict.violations],
                },
            )
            logger.info(
                f"Booking {booking.id} placed on weather hold: {verdict.reason}",
                extra={'booking_id': str(booking.id)}
            )
            return event

        return None

    # ==========================================================================
    # Operator Transitions
    # ==========================================================================

    def cancel(self, booking: Booking, actor: str, reason: str = '') -> HistoryEvent:
        """Cancel a confirmed or held booking."""
        event = self._transition(
            booking,
            BookingStatus.CANCELLED,
            HistoryAction.CANCELLED,
            actor,
            notes=reason,
        )
        logger.info(f"Cancelled booking {booking.id}")
        return event

    def complete(self, booking: Booking, actor: str, notes: str = '') -> HistoryEvent:
        """Complete a confirmed booking."""
        event = self._transition(
            booking,
            BookingStatus.COMPLETED,
            HistoryAction.COMPLETED,
            actor,
            notes=notes,
        )
        logger.info(f"Completed booking {booking.id}")
        return event

    def reschedule(
        self,
        booking: Booking,
        new_date: datetime,
        actor: str,
        reasoning: str = ''
    ) -> HistoryEvent:
        """Move a held booking to a new time and confirm it."""
        if booking.is_terminal:
            raise TerminalBookingImmutableError(booking.id, booking.status.value)
        if not booking.is_on_hold:
            raise BookingNotOnHoldError(booking.id, booking.status.value)

        old_date = booking.scheduled_date
        booking.scheduled_date = new_date

        event = self._transition(
            booking,
            BookingStatus.CONFIRMED,
            HistoryAction.RESCHEDULED,
            actor,
            notes=reasoning,
            extra_changes={
                'scheduled_date': {
                    'old': old_date.isoformat(),
                    'new': new_date.isoformat(),
                },
                'reasoning': reasoning,
            },
        )
        logger.info(
            f"Rescheduled booking {booking.id} from {old_date.isoformat()} "
            f"to {new_date.isoformat()}"
        )
        return event

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def _transition(
        self,
        booking: Booking,
        target: BookingStatus,
        action: HistoryAction,
        actor: str,
        notes: str = '',
        extra_changes: Dict[str, Any] = None
    ) -> HistoryEvent:
        current = booking.status
        if not self.can_transition(current, target):
            raise InvalidTransitionError(
                current.value,
                target.value,
                details={'booking_id': str(booking.id)}
            )

        booking.status = target

        changes = {'status': {'old': current.value, 'new': target.value}}
        if extra_changes:
            changes.update(extra_changes)

        event = HistoryEvent(
            flight_id=booking.id,
            action=action,
            changed_by=actor,
            changes=changes,
            notes=notes,
        )
        booking.history.append(event)
        return event
