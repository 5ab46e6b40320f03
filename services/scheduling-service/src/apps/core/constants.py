# services/scheduling-service/src/apps/core/constants.py
"""
Scheduling Service Constants

Enumerations shared by the weather-aware scheduling core.
"""

from enum import Enum


class TrainingLevel(str, Enum):
    """Pilot certification tier, ordered from least to most capable."""
    STUDENT_PILOT = 'STUDENT_PILOT'
    PRIVATE_PILOT = 'PRIVATE_PILOT'
    INSTRUMENT_RATED = 'INSTRUMENT_RATED'


# Least to most capable
TRAINING_LEVEL_ORDER = (
    TrainingLevel.STUDENT_PILOT,
    TrainingLevel.PRIVATE_PILOT,
    TrainingLevel.INSTRUMENT_RATED,
)


class BookingStatus(str, Enum):
    """Booking lifecycle states."""
    CONFIRMED = 'CONFIRMED'
    WEATHER_HOLD = 'WEATHER_HOLD'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'


TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})
ACTIVE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.WEATHER_HOLD})


class FlightType(str, Enum):
    """Kind of training flight."""
    TRAINING = 'TRAINING'
    SOLO = 'SOLO'
    CROSS_COUNTRY = 'CROSS_COUNTRY'


class HistoryAction(str, Enum):
    """Actions recorded in flight history."""
    CREATED = 'CREATED'
    UPDATED = 'UPDATED'
    STATUS_CHANGED = 'STATUS_CHANGED'
    RESCHEDULED = 'RESCHEDULED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'


class ViolationCode(str, Enum):
    """Reasons a weather sample fails the minima for a training level."""
    VISIBILITY_BELOW_MINIMUM = 'VISIBILITY_BELOW_MINIMUM'
    CEILING_BELOW_MINIMUM = 'CEILING_BELOW_MINIMUM'
    WIND_EXCEEDS_MAXIMUM = 'WIND_EXCEEDS_MAXIMUM'
    PRECIPITATION_NOT_ALLOWED = 'PRECIPITATION_NOT_ALLOWED'
    THUNDERSTORMS_PRESENT = 'THUNDERSTORMS_PRESENT'
    ICING_PRESENT = 'ICING_PRESENT'


class WeatherCategory(str, Enum):
    """Flight category based on weather."""
    VFR = 'vfr'
    MVFR = 'mvfr'
    IFR = 'ifr'
    LIFR = 'lifr'


class ParticipantRole(str, Enum):
    """Who an availability record belongs to."""
    STUDENT = 'student'
    INSTRUCTOR = 'instructor'
    AIRCRAFT = 'aircraft'
