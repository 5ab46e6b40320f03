# services/scheduling-service/src/apps/core/models/weather.py
"""
Weather Models

Immutable weather samples, locations, and safety verdicts.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from django.utils.dateparse import parse_datetime

from ..constants import TrainingLevel, ViolationCode, WeatherCategory


@dataclass(frozen=True)
class Location:
    """Named airport or field position."""
    name: str
    lat: float
    lon: float

    def __post_init__(self):
        if not self.name:
            raise ValueError("Location name is required")
        if not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180 <= self.lon <= 180:
            raise ValueError(f"Longitude out of range: {self.lon}")

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'lat': self.lat, 'lon': self.lon}


@dataclass(frozen=True)
class WeatherConditionSet:
    """
    Observed or forecast weather at one place and time.

    A missing ceiling means the sky is unlimited (no ceiling layer),
    never that the value is unknown.
    """
    visibility: float  # statute miles
    wind_speed: float  # knots
    temperature: float  # Fahrenheit
    humidity: float  # percent
    timestamp: datetime
    ceiling: Optional[float] = None  # feet AGL
    wind_direction: Optional[int] = None  # degrees
    precipitation: bool = False
    thunderstorms: bool = False
    icing: bool = False
    cloud_cover: Optional[float] = None  # percent
    description: str = ''

    def __post_init__(self):
        if self.visibility < 0:
            raise ValueError(f"Visibility cannot be negative: {self.visibility}")
        if self.wind_speed < 0:
            raise ValueError(f"Wind speed cannot be negative: {self.wind_speed}")
        if self.ceiling is not None and self.ceiling < 0:
            raise ValueError(f"Ceiling cannot be negative: {self.ceiling}")
        if self.wind_direction is not None and not 0 <= self.wind_direction <= 359:
            raise ValueError(f"Wind direction out of range: {self.wind_direction}")
        if not 0 <= self.humidity <= 100:
            raise ValueError(f"Humidity out of range: {self.humidity}")
        if self.cloud_cover is not None and not 0 <= self.cloud_cover <= 100:
            raise ValueError(f"Cloud cover out of range: {self.cloud_cover}")

    @property
    def has_unlimited_ceiling(self) -> bool:
        return self.ceiling is None

    @property
    def flight_category(self) -> WeatherCategory:
        """Classify the sample as VFR, MVFR, IFR or LIFR."""
        ceiling = float('inf') if self.ceiling is None else self.ceiling

        if self.visibility < 1 or ceiling < 500:
            return WeatherCategory.LIFR
        if self.visibility < 3 or ceiling < 1000:
            return WeatherCategory.IFR
        if self.visibility <= 5 or ceiling <= 3000:
            return WeatherCategory.MVFR
        return WeatherCategory.VFR

    def summary(self) -> str:
        """One-line forecast text."""
        return (
            f"Expected conditions: {self.description or 'Unknown'}, "
            f"Visibility: {self.visibility:g} mi, Wind: {self.wind_speed:g} kt"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'visibility': self.visibility,
            'ceiling': self.ceiling,
            'wind_speed': self.wind_speed,
            'wind_direction': self.wind_direction,
            'temperature': self.temperature,
            'humidity': self.humidity,
            'precipitation': self.precipitation,
            'thunderstorms': self.thunderstorms,
            'icing': self.icing,
            'cloud_cover': self.cloud_cover,
            'description': self.description,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeatherConditionSet':
        values = dict(data)
        timestamp = values.pop('timestamp')
        if isinstance(timestamp, str):
            timestamp = parse_datetime(timestamp)
        return cls(timestamp=timestamp, **values)


@dataclass(frozen=True)
class SafetyVerdict:
    """Result of evaluating weather against the minima for a training level."""
    is_safe: bool
    reason: str
    evaluated_at: datetime
    training_level: TrainingLevel
    violations: Tuple[ViolationCode, ...] = ()
    messages: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_safe': self.is_safe,
            'violations': [code.value for code in self.violations],
            'reason': self.reason,
            'evaluated_at': self.evaluated_at.isoformat(),
            'training_level': self.training_level.value,
        }
