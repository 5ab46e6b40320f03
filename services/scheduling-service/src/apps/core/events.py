# services/scheduling-service/src/apps/core/events.py
"""
Scheduling Service Events

Notification events emitted for booking status changes and reschedule
options. Delivery to users is handled by the notification service.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import redis
from django.conf import settings
from django.utils import timezone

from .constants import BookingStatus, HistoryAction

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for scheduling service."""

    BOOKING_WEATHER_HOLD = 'booking.weather_hold'
    BOOKING_WEATHER_CLEARED = 'booking.weather_cleared'
    BOOKING_RESCHEDULED = 'booking.rescheduled'
    BOOKING_CANCELLED = 'booking.cancelled'
    BOOKING_COMPLETED = 'booking.completed'
    BOOKING_RESCHEDULE_OPTIONS = 'booking.reschedule_options'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for scheduling service.

    Backends:
    - log (default)
    - redis pub/sub
    - memory (for testing)
    """

    # In-memory event store for testing
    _memory_events: List[Dict[str, Any]] = []

    def __init__(self, backend: Optional[str] = None):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'scheduling-service')
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)
        self.backend = backend or getattr(settings, 'EVENT_BACKEND', 'log')
        self._redis = None

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: str = None
    ) -> bool:
        """
        Publish an event.

        Failures are logged and reported through the return value; they
        never propagate to the caller.
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': timezone.now().isoformat(),
            'correlation_id': correlation_id,
            'payload': payload,
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
                'booking_id': str(payload.get('booking_id')),
            })

            if self.backend == 'redis':
                self._publish_redis(event_type, event_json)
            elif self.backend == 'memory':
                self._publish_memory(event_type, event_json)
            else:
                logger.debug(f"Event payload: {event_json[:500]}")

            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_redis(self, event_type: str, event_json: str):
        """Publish to Redis pub/sub."""
        if self._redis is None:
            self._redis = redis.Redis(
                host=getattr(settings, 'REDIS_HOST', 'localhost'),
                port=getattr(settings, 'REDIS_PORT', 6379),
                db=getattr(settings, 'REDIS_DB', 0)
            )
        self._redis.publish(f"events:{event_type}", event_json)

    def _publish_memory(self, event_type: str, event_json: str):
        self._memory_events.append(json.loads(event_json))
        logger.debug(f"Stored event {event_type} in memory")

    @classmethod
    def get_memory_events(cls, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get events from memory store (for testing)."""
        if event_type:
            return [e for e in cls._memory_events if e['event_type'] == event_type]
        return list(cls._memory_events)

    @classmethod
    def clear_memory_events(cls):
        """Clear memory event store (for testing)."""
        cls._memory_events.clear()


def get_event_type(event) -> Optional[str]:
    """Notification event type for a history event, if any."""
    if event.action == HistoryAction.STATUS_CHANGED:
        new_status = event.changes.get('status', {}).get('new')
        if new_status == BookingStatus.WEATHER_HOLD.value:
            return EventType.BOOKING_WEATHER_HOLD
        if new_status == BookingStatus.CONFIRMED.value:
            return EventType.BOOKING_WEATHER_CLEARED
        return None

    return {
        HistoryAction.RESCHEDULED: EventType.BOOKING_RESCHEDULED,
        HistoryAction.CANCELLED: EventType.BOOKING_CANCELLED,
        HistoryAction.COMPLETED: EventType.BOOKING_COMPLETED,
    }.get(event.action)


# Convenience functions for publishing specific events
def publish_history_event(
    booking,
    event,
    minima_description: str = None,
    publisher: EventPublisher = None
) -> bool:
    """Publish the notification for a booking history event."""
    event_type = get_event_type(event)
    if event_type is None:
        return False

    payload = {
        'booking_id': booking.id,
        'history_event_id': event.id,
        'student_id': booking.student_id,
        'instructor_id': booking.instructor_id,
        'aircraft_id': booking.aircraft_id,
        'recipients': [booking.student_id, booking.instructor_id],
        'status': booking.status,
        'scheduled_date': booking.scheduled_date,
        'departure_location': booking.departure_location.to_dict(),
        'changed_by': event.changed_by,
        'changes': event.changes,
        'notes': event.notes,
    }
    if event_type == EventType.BOOKING_WEATHER_HOLD and booking.latest_verdict:
        payload['verdict'] = booking.latest_verdict.to_dict()
        payload['minima'] = minima_description

    return (publisher or EventPublisher()).publish(event_type, payload)


def publish_reschedule_options(
    booking,
    candidates: Sequence,
    publisher: EventPublisher = None
) -> bool:
    """Publish generated reschedule options for operator review."""
    return (publisher or EventPublisher()).publish(
        EventType.BOOKING_RESCHEDULE_OPTIONS,
        payload={
            'booking_id': booking.id,
            'student_id': booking.student_id,
            'instructor_id': booking.instructor_id,
            'recipients': [booking.student_id, booking.instructor_id],
            'options': [candidate.to_dict() for candidate in candidates],
        }
    )
