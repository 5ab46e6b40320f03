# services/scheduling-service/src/apps/core/services/__init__.py
"""
Scheduling Service Services
"""

from .exceptions import (
    ErrorKind,
    SchedulingError,
    InvalidTrainingLevelError,
    InvalidTransitionError,
    TerminalBookingImmutableError,
    BookingNotOnHoldError,
    CandidateNoLongerSafeError,
    ForecastUnavailableError,
    WeatherSourceUnavailableError,
    BookingNotFoundError,
    ConcurrentModificationError,
)
from .minima_policy import MinimaPolicy, WeatherMinimums, DEFAULT_MINIMA
from .safety_evaluator import SafetyEvaluator
from .state_machine import BookingStateMachine
from .scoring import CandidateScorer, LeadTimeScorer
from .reschedule_engine import RescheduleEngine
from .reschedule_confirmer import RescheduleConfirmer
from .reschedule_service import RescheduleService
from .weather_check_service import WeatherCheckService, WeatherCheckResult

__all__ = [
    # Exceptions
    'ErrorKind',
    'SchedulingError',
    'InvalidTrainingLevelError',
    'InvalidTransitionError',
    'TerminalBookingImmutableError',
    'BookingNotOnHoldError',
    'CandidateNoLongerSafeError',
    'ForecastUnavailableError',
    'WeatherSourceUnavailableError',
    'BookingNotFoundError',
    'ConcurrentModificationError',
    # Services
    'MinimaPolicy',
    'WeatherMinimums',
    'DEFAULT_MINIMA',
    'SafetyEvaluator',
    'BookingStateMachine',
    'CandidateScorer',
    'LeadTimeScorer',
    'RescheduleEngine',
    'RescheduleConfirmer',
    'RescheduleService',
    'WeatherCheckService',
    'WeatherCheckResult',
]
