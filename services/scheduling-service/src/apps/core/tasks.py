# services/scheduling-service/src/apps/core/tasks.py
"""
Scheduling Service Celery Tasks

Periodic and on-demand weather checks, and the reschedule workflow.
"""

import logging
from uuid import UUID

from celery import shared_task

from .services.exceptions import SchedulingError

logger = logging.getLogger(__name__)


def build_weather_check_service():
    """Weather check service wired from settings."""
    from .services import MinimaPolicy, SafetyEvaluator, WeatherCheckService
    from .weather import get_weather_source

    return WeatherCheckService(
        weather_source=get_weather_source(),
        evaluator=SafetyEvaluator(MinimaPolicy.from_settings()),
    )


def build_reschedule_service():
    """Reschedule service wired from settings."""
    from .repositories import get_booking_repository
    from .services import (
        MinimaPolicy,
        RescheduleConfirmer,
        RescheduleEngine,
        RescheduleService,
        SafetyEvaluator,
    )
    from .weather import get_weather_source

    weather_source = get_weather_source()
    evaluator = SafetyEvaluator(MinimaPolicy.from_settings())

    return RescheduleService(
        repository=get_booking_repository(),
        engine=RescheduleEngine(weather_source, evaluator),
        confirmer=RescheduleConfirmer(weather_source, evaluator),
    )


def _retry_transient(task, error: SchedulingError, booking_id: str, action: str):
    """Retry transient scheduling errors; re-raise everything else."""
    if not error.transient:
        logger.warning(f"{action} rejected for booking {booking_id}: {error.message}")
        raise error
    logger.error(f"{action} failed for booking {booking_id}: {error.message}")
    task.retry(countdown=60, exc=error)


@shared_task(bind=True, max_retries=3)
def run_weather_check(self):
    """
    Check weather for all upcoming bookings.

    Scheduled hourly by Celery beat.
    """
    try:
        from .repositories import get_booking_repository

        service = build_weather_check_service()
        stats = service.run_sweep(get_booking_repository())

        logger.info(f"Weather check sweep finished: {stats}")
        return stats

    except Exception as e:
        logger.error(f"Error running weather check: {e}")
        self.retry(countdown=60, exc=e)


@shared_task(bind=True, max_retries=3)
def check_booking_weather(self, booking_id: str):
    """
    Check weather for a single booking.

    Args:
        booking_id: Booking UUID as string
    """
    from .repositories import get_booking_repository

    repository = get_booking_repository()
    service = build_weather_check_service()
    booking_uuid = UUID(booking_id)

    try:
        with repository.lock(booking_uuid):
            booking = repository.get(booking_uuid)
            result = service.check_booking(booking)
            if result.changed:
                repository.save(booking)

        return result.to_dict()

    except SchedulingError as e:
        _retry_transient(self, e, booking_id, 'Weather check')


@shared_task(bind=True, max_retries=3)
def generate_reschedule_options(
    self,
    booking_id: str,
    forecast_window: dict = None,
    participant_availability: list = None
):
    """
    Generate reschedule options for a held booking.

    Args:
        booking_id: Booking UUID as string
        forecast_window: Optional {start, end}; defaults to now until the horizon
        participant_availability: Optional free/busy entries per participant

    Returns:
        Ranked options as dictionaries
    """
    from .serializers import RescheduleOptionsRequestSerializer

    payload = {
        'booking_id': booking_id,
        'participant_availability': participant_availability or [],
    }
    if forecast_window:
        payload['forecast_window'] = forecast_window

    serializer = RescheduleOptionsRequestSerializer(data=payload)
    serializer.is_valid(raise_exception=True)
    request = serializer.save()

    try:
        candidates = build_reschedule_service().request_options(
            request['booking_id'],
            request['forecast_window'],
            request['participant_availability'],
        )
        return [candidate.to_dict() for candidate in candidates]

    except SchedulingError as e:
        _retry_transient(self, e, booking_id, 'Reschedule option generation')


@shared_task(bind=True, max_retries=3)
def confirm_reschedule(self, booking_id: str, candidate: dict, actor: str = None):
    """
    Confirm a selected reschedule option.

    Args:
        booking_id: Booking UUID as string
        candidate: Option as returned by generate_reschedule_options
        actor: User confirming the option
    """
    from .serializers import RescheduleCandidateSerializer

    serializer = RescheduleCandidateSerializer(data=candidate)
    serializer.is_valid(raise_exception=True)

    try:
        booking = build_reschedule_service().confirm_option(
            UUID(booking_id),
            serializer.save(),
            actor=actor,
        )
        return {
            'booking_id': str(booking.id),
            'status': booking.status.value,
            'scheduled_date': booking.scheduled_date.isoformat(),
            'version': booking.version,
        }

    except SchedulingError as e:
        _retry_transient(self, e, booking_id, 'Reschedule confirmation')
