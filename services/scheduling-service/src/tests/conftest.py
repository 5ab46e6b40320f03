# services/scheduling-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for scheduling service tests.
"""

import threading
import uuid
from datetime import datetime, timezone as dt_timezone

import pytest
from django.core.cache import cache

from apps.core.constants import BookingStatus, TrainingLevel
from apps.core.events import EventPublisher
from apps.core.models import Booking, Location, WeatherConditionSet
from apps.core.repositories import InMemoryBookingRepository, get_booking_repository
from apps.core.services import BookingStateMachine, MinimaPolicy, SafetyEvaluator
from apps.core.weather import WeatherSource


class StubWeatherSource(WeatherSource):
    """Weather source driven by a callable, recording every lookup."""

    def __init__(self, factory, certainty: float = 0.9):
        self.factory = factory
        self.certainty = certainty
        self.calls = []
        self._lock = threading.Lock()

    def get_conditions(self, location, at):
        with self._lock:
            self.calls.append((location.name, at))
        return self.factory(location, at)


@pytest.fixture(autouse=True)
def reset_state():
    """Clear shared in-process state between tests."""
    EventPublisher.clear_memory_events()
    cache.clear()
    get_booking_repository.cache_clear()
    yield
    EventPublisher.clear_memory_events()
    get_booking_repository.cache_clear()


@pytest.fixture
def student_id():
    """Provide a test student ID."""
    return uuid.uuid4()


@pytest.fixture
def instructor_id():
    """Provide a test instructor ID."""
    return uuid.uuid4()


@pytest.fixture
def aircraft_id():
    """Provide a test aircraft ID."""
    return uuid.uuid4()


@pytest.fixture
def now():
    """Fixed reference time (Monday 06:00 UTC)."""
    return datetime(2025, 6, 2, 6, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def departure():
    return Location(name='KPAO', lat=37.4611, lon=-122.1150)


@pytest.fixture
def destination():
    return Location(name='KSQL', lat=37.5119, lon=-122.2494)


@pytest.fixture
def make_conditions(now):
    """Factory for weather samples; defaults are clear VFR conditions."""
    def _make(**overrides):
        values = {
            'visibility': 10,
            'ceiling': 15000,
            'wind_speed': 5,
            'wind_direction': 180,
            'temperature': 72,
            'humidity': 45,
            'cloud_cover': 0,
            'description': 'Clear skies, excellent visibility',
            'timestamp': now,
        }
        values.update(overrides)
        return WeatherConditionSet(**values)
    return _make


@pytest.fixture
def make_booking(student_id, instructor_id, aircraft_id, departure, now):
    """Factory for bookings scheduled at 10:00 on the reference day."""
    def _make(**overrides):
        values = {
            'student_id': student_id,
            'instructor_id': instructor_id,
            'aircraft_id': aircraft_id,
            'scheduled_date': now.replace(hour=10),
            'departure_location': departure,
            'training_level': TrainingLevel.STUDENT_PILOT,
            'status': BookingStatus.CONFIRMED,
        }
        values.update(overrides)
        return Booking(**values)
    return _make


@pytest.fixture
def make_source(make_conditions):
    """
    Factory for stub weather sources.

    Without a factory every lookup returns clear conditions stamped with
    the requested time.
    """
    def _make(factory=None, certainty=0.9):
        if factory is None:
            def factory(location, at):
                return make_conditions(timestamp=at)
        return StubWeatherSource(factory, certainty=certainty)
    return _make


@pytest.fixture
def policy():
    return MinimaPolicy.default()


@pytest.fixture
def evaluator(policy):
    return SafetyEvaluator(policy)


@pytest.fixture
def state_machine():
    return BookingStateMachine(system_actor='system')


@pytest.fixture
def repository():
    return InMemoryBookingRepository()


@pytest.fixture
def memory_events():
    """Read events published to the memory backend."""
    return EventPublisher.get_memory_events
