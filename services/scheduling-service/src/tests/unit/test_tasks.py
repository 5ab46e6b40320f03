# services/scheduling-service/src/tests/unit/test_tasks.py
"""
Unit Tests for Celery Tasks
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from celery.exceptions import Retry
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.core.constants import BookingStatus
from apps.core.events import EventType
from apps.core.repositories import get_booking_repository
from apps.core.services import (
    BookingNotFoundError,
    ConcurrentModificationError,
    InvalidTransitionError,
    WeatherSourceUnavailableError,
)
from apps.core.tasks import (
    check_booking_weather,
    confirm_reschedule,
    generate_reschedule_options,
    run_weather_check,
)


class TestRunWeatherCheck:
    """Tests for the periodic weather check task."""

    def test_sweeps_configured_repository(self, settings, make_booking):
        settings.WEATHER_DEMO_SCENARIO = 'student-conflict'
        repository = get_booking_repository()
        booking = repository.add(make_booking(scheduled_date=timezone.now() + timedelta(hours=3)))

        stats = run_weather_check.apply().get()

        assert stats['holds'] == 1
        assert repository.get(booking.id).status == BookingStatus.WEATHER_HOLD

    def test_retries_on_failure(self):
        with patch('apps.core.tasks.build_weather_check_service', side_effect=RuntimeError('boom')):
            with patch.object(run_weather_check, 'retry', side_effect=Retry()) as mock_retry:
                with pytest.raises(Retry):
                    run_weather_check()

        assert mock_retry.call_args[1]['countdown'] == 60


class TestCheckBookingWeather:
    """Tests for the single booking weather check task."""

    def test_check_and_save(self, settings, make_booking):
        settings.WEATHER_DEMO_SCENARIO = 'instrument-conflict'
        repository = get_booking_repository()
        booking = repository.add(make_booking())

        result = check_booking_weather(str(booking.id))

        assert result['status'] == 'WEATHER_HOLD'
        assert result['changed'] is True
        assert repository.get(booking.id).version == 2

    def test_unknown_booking(self):
        with pytest.raises(BookingNotFoundError):
            check_booking_weather(str(uuid.uuid4()))

    def test_retries_when_weather_unavailable(self, make_booking):
        booking = get_booking_repository().add(make_booking())

        with patch(
            'apps.core.weather.sources.ScenarioWeatherSource.get_conditions',
            side_effect=WeatherSourceUnavailableError('Upstream timeout'),
        ):
            with patch.object(check_booking_weather, 'retry', side_effect=Retry()) as mock_retry:
                with pytest.raises(Retry):
                    check_booking_weather(str(booking.id))

        assert isinstance(mock_retry.call_args[1]['exc'], WeatherSourceUnavailableError)


class TestRescheduleTasks:
    """Tests for the reschedule option and confirmation tasks."""

    @pytest.fixture
    def held_booking(self, make_booking):
        return get_booking_repository().add(make_booking(
            status=BookingStatus.WEATHER_HOLD,
            scheduled_date=timezone.now() + timedelta(hours=3),
        ))

    def test_generate_then_confirm(self, held_booking, memory_events):
        options = generate_reschedule_options(str(held_booking.id))

        assert 1 <= len(options) <= 3
        assert [option['priority'] for option in options] == list(range(1, len(options) + 1))
        assert len(memory_events(EventType.BOOKING_RESCHEDULE_OPTIONS)) == 1

        result = confirm_reschedule(str(held_booking.id), options[0], actor='ops')

        assert result['status'] == 'CONFIRMED'
        assert result['scheduled_date'] == options[0]['date_time']
        assert result['version'] == 2
        assert len(memory_events(EventType.BOOKING_RESCHEDULED)) == 1

    def test_explicit_forecast_window(self, held_booking):
        start = (timezone.now() + timedelta(days=2)).replace(hour=0, minute=0, second=0, microsecond=0)

        options = generate_reschedule_options(
            str(held_booking.id),
            forecast_window={
                'start': start.isoformat(),
                'end': (start + timedelta(days=1)).isoformat(),
            },
        )

        assert options
        assert all(option['date_time'].startswith(start.date().isoformat()) for option in options)

    def test_invalid_candidate_payload(self, held_booking):
        with pytest.raises(ValidationError):
            confirm_reschedule(str(held_booking.id), {'priority': 0})

    def test_rejection_not_retried(self, held_booking):
        options = generate_reschedule_options(str(held_booking.id))
        options[0]['booking_id'] = str(uuid.uuid4())

        with patch.object(confirm_reschedule, 'retry') as mock_retry:
            with pytest.raises(InvalidTransitionError):
                confirm_reschedule(str(held_booking.id), options[0])

        mock_retry.assert_not_called()

    def test_concurrent_modification_retried(self, held_booking):
        options = generate_reschedule_options(str(held_booking.id))
        error = ConcurrentModificationError(held_booking.id, 1, 2)

        with patch(
            'apps.core.services.RescheduleService.confirm_option',
            side_effect=error,
        ):
            with patch.object(confirm_reschedule, 'retry', side_effect=Retry()) as mock_retry:
                with pytest.raises(Retry):
                    confirm_reschedule(str(held_booking.id), options[0])

        assert mock_retry.call_args[1]['exc'] is error
