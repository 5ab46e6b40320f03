# services/scheduling-service/src/apps/core/models/__init__.py
"""
Scheduling Service Models
"""

from .weather import Location, WeatherConditionSet, SafetyVerdict
from .history import HistoryEvent
from .booking import Booking
from .reschedule import (
    AvailabilityWindow,
    ForecastWindow,
    ParticipantAvailability,
    RescheduleCandidate,
)

__all__ = [
    'Location',
    'WeatherConditionSet',
    'SafetyVerdict',
    'HistoryEvent',
    'Booking',
    'AvailabilityWindow',
    'ForecastWindow',
    'ParticipantAvailability',
    'RescheduleCandidate',
]
