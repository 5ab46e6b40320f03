# services/scheduling-service/src/apps/core/services/minima_policy.py
"""
Minima Policy

Per-training-level weather thresholds. Loaded once and read-only afterwards.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Union

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from ..constants import TrainingLevel, TRAINING_LEVEL_ORDER
from .exceptions import InvalidTrainingLevelError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherMinimums:
    """Thresholds a pilot of one training level may fly in."""
    min_visibility: float  # statute miles
    min_ceiling: float  # feet
    max_wind_speed: float  # knots
    allow_precipitation: bool = True
    allow_thunderstorms: bool = False
    allow_icing: bool = False


DEFAULT_MINIMA = {
    TrainingLevel.STUDENT_PILOT: WeatherMinimums(
        min_visibility=5,
        min_ceiling=3000,
        max_wind_speed=10,
        allow_precipitation=False,
    ),
    TrainingLevel.PRIVATE_PILOT: WeatherMinimums(
        min_visibility=3,
        min_ceiling=1000,
        max_wind_speed=20,
    ),
    TrainingLevel.INSTRUMENT_RATED: WeatherMinimums(
        min_visibility=0,
        min_ceiling=0,
        max_wind_speed=30,
    ),
}


def parse_training_level(value: Union[str, TrainingLevel]) -> TrainingLevel:
    """Coerce a string or enum member into a TrainingLevel."""
    if isinstance(value, TrainingLevel):
        return value
    try:
        return TrainingLevel(str(value).upper())
    except ValueError:
        raise InvalidTrainingLevelError(value)


class MinimaPolicy:
    """
    Read-only table of weather minima keyed by training level.

    The table must cover every training level, and a more capable level
    may never have stricter minima than a less capable one.
    """

    def __init__(self, minima: Mapping[TrainingLevel, WeatherMinimums]):
        table = {}
        for level, minimums in minima.items():
            try:
                key = parse_training_level(level)
            except InvalidTrainingLevelError as e:
                raise ImproperlyConfigured(e.message)
            table[key] = minimums

        missing = [level.value for level in TRAINING_LEVEL_ORDER if level not in table]
        if missing:
            raise ImproperlyConfigured(
                f"Weather minima missing for training levels: {', '.join(missing)}"
            )

        self._validate_monotonic(table)
        self._minima = MappingProxyType(table)

    @classmethod
    def default(cls) -> 'MinimaPolicy':
        return cls(DEFAULT_MINIMA)

    @classmethod
    def from_settings(cls) -> 'MinimaPolicy':
        """Build the policy from the WEATHER_MINIMA setting."""
        configured = getattr(settings, 'WEATHER_MINIMA', None)
        if not configured:
            logger.warning("WEATHER_MINIMA not configured, using default minima")
            return cls.default()

        minima = {}
        for level, values in configured.items():
            try:
                minima[level] = WeatherMinimums(**values)
            except TypeError as e:
                raise ImproperlyConfigured(f"Invalid weather minima for {level}: {e}")
        return cls(minima)

    def for_level(self, training_level: Union[str, TrainingLevel]) -> WeatherMinimums:
        """Get the minima for a training level."""
        level = parse_training_level(training_level)
        try:
            return self._minima[level]
        except KeyError:
            raise InvalidTrainingLevelError(training_level)

    def describe(self, training_level: Union[str, TrainingLevel]) -> str:
        """Human-readable summary of the minima for a level."""
        level = parse_training_level(training_level)
        minimums = self.for_level(level)

        parts = [
            f"Visibility >= {minimums.min_visibility:g} mi",
            (
                f"Ceiling >= {minimums.min_ceiling:g} ft" if minimums.min_ceiling
                else "No ceiling minimum"
            ),
            f"Wind <= {minimums.max_wind_speed:g} kt",
        ]
        if not minimums.allow_precipitation:
            parts.append("no precipitation")
        if not minimums.allow_thunderstorms:
            parts.append("no thunderstorms")
        if not minimums.allow_icing:
            parts.append("no icing")

        return f"{level.value.replace('_', ' ').title()}: {', '.join(parts)}"

    # ==========================================================================
    # Validation
    # ==========================================================================

    @staticmethod
    def _validate_monotonic(table: Dict[TrainingLevel, WeatherMinimums]):
        for weaker, stronger in zip(TRAINING_LEVEL_ORDER, TRAINING_LEVEL_ORDER[1:]):
            lower = table[weaker]
            upper = table[stronger]
            problems = []

            if upper.min_visibility > lower.min_visibility:
                problems.append('min_visibility')
            if upper.min_ceiling > lower.min_ceiling:
                problems.append('min_ceiling')
            if upper.max_wind_speed < lower.max_wind_speed:
                problems.append('max_wind_speed')
            for flag in ('allow_precipitation', 'allow_thunderstorms', 'allow_icing'):
                if getattr(lower, flag) and not getattr(upper, flag):
                    problems.append(flag)

            if problems:
                raise ImproperlyConfigured(
                    f"{stronger.value} minima are stricter than {weaker.value} "
                    f"for: {', '.join(problems)}"
                )
