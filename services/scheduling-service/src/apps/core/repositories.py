# services/scheduling-service/src/apps/core/repositories.py
"""
Booking Repositories

Persistence seam for the scheduling core. The core never writes to storage
itself; callers load bookings here, run core operations, and save.
"""

import copy
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List

from django.conf import settings
from django.utils.module_loading import import_string

from .constants import ACTIVE_STATUSES, BookingStatus
from .models.booking import Booking
from .models.history import HistoryEvent
from .services.exceptions import BookingNotFoundError, ConcurrentModificationError

logger = logging.getLogger(__name__)


class BookingRepository(ABC):
    """
    Storage contract for bookings and their history.

    ``save`` performs an optimistic version check: the booking's version must
    match the stored one, and the stored version is incremented on success.
    """

    @abstractmethod
    def get(self, booking_id: uuid.UUID) -> Booking:
        """Load a booking with an empty pending history."""

    @abstractmethod
    def add(self, booking: Booking) -> Booking:
        """Store a new booking."""

    @abstractmethod
    def save(self, booking: Booking) -> Booking:
        """Persist a booking and append its pending history events."""

    @abstractmethod
    def list_upcoming(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus] = ACTIVE_STATUSES
    ) -> List[Booking]:
        """Bookings scheduled in [start, end) with one of ``statuses``."""

    @abstractmethod
    def lock(self, booking_id: uuid.UUID):
        """Context manager serializing writes to one booking."""

    @abstractmethod
    def history(self, booking_id: uuid.UUID) -> List[HistoryEvent]:
        """Persisted history for a booking, oldest first."""


class InMemoryBookingRepository(BookingRepository):
    """Thread-safe in-process repository."""

    def __init__(self):
        self._bookings: Dict[uuid.UUID, Booking] = {}
        self._history: Dict[uuid.UUID, List[HistoryEvent]] = {}
        self._locks: Dict[uuid.UUID, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, booking_id: uuid.UUID) -> Booking:
        with self._guard:
            stored = self._bookings.get(booking_id)
            if stored is None:
                raise BookingNotFoundError(booking_id)
            return self._detach(stored)

    def add(self, booking: Booking) -> Booking:
        with self._guard:
            stored = self._detach(booking)
            stored.version = 1
            self._bookings[booking.id] = stored
            self._history[booking.id] = list(booking.history)
            booking.version = stored.version
            booking.history.clear()

        logger.info(f"Added booking {booking.id}")
        return booking

    def save(self, booking: Booking) -> Booking:
        with self._guard:
            stored = self._bookings.get(booking.id)
            if stored is None:
                raise BookingNotFoundError(booking.id)
            if stored.version != booking.version:
                raise ConcurrentModificationError(booking.id, booking.version, stored.version)

            updated = self._detach(booking)
            updated.version = stored.version + 1
            self._bookings[booking.id] = updated
            self._history[booking.id].extend(booking.history)

            booking.version = updated.version
            saved_events = len(booking.history)
            booking.history.clear()

        logger.debug(
            f"Saved booking {booking.id} at version {booking.version} "
            f"with {saved_events} history events"
        )
        return booking

    def list_upcoming(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus] = ACTIVE_STATUSES
    ) -> List[Booking]:
        statuses = set(statuses)
        with self._guard:
            matches = [
                self._detach(booking)
                for booking in self._bookings.values()
                if booking.status in statuses and start <= booking.scheduled_date < end
            ]
        return sorted(matches, key=lambda booking: booking.scheduled_date)

    @contextmanager
    def lock(self, booking_id: uuid.UUID) -> Iterator[None]:
        with self._guard:
            booking_lock = self._locks.setdefault(booking_id, threading.Lock())
        with booking_lock:
            yield

    def history(self, booking_id: uuid.UUID) -> List[HistoryEvent]:
        with self._guard:
            if booking_id not in self._bookings:
                raise BookingNotFoundError(booking_id)
            return list(self._history[booking_id])

    @staticmethod
    def _detach(booking: Booking) -> Booking:
        detached = copy.deepcopy(booking)
        detached.history = []
        return detached


@lru_cache(maxsize=None)
def get_booking_repository() -> BookingRepository:
    """Process-wide repository built from BOOKING_REPOSITORY_CLASS."""
    repository_class = import_string(
        getattr(
            settings,
            'BOOKING_REPOSITORY_CLASS',
            'apps.core.repositories.InMemoryBookingRepository'
        )
    )
    return repository_class()
