# services/scheduling-service/src/apps/core/weather/sources.py
"""
Weather Sources

Suppliers of observed and forecast conditions for a location and time.
"""

import dataclasses
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from django.core.cache import cache
from django.utils.module_loading import import_string

from ..models.weather import Location, WeatherConditionSet
from .scenarios import DemoScenario, get_scenario

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = 'weather'

RouteSamples = List[Tuple[Location, WeatherConditionSet]]


def _location_key(location: Optional[Location]) -> str:
    if location is None:
        return 'all'
    return f"{location.name}@{location.lat:.4f},{location.lon:.4f}"


def _version_key(location: Optional[Location]) -> str:
    return f"{CACHE_KEY_PREFIX}:version:{_location_key(location)}"


def invalidate_cached_weather(location: Optional[Location] = None):
    """
    Drop cached weather for one location, or for every location.

    Bumps a version counter that is part of every cache key, so entries
    written before the call are never read again and expire on their own.
    """
    version_key = _version_key(location)
    cache.set(version_key, cache.get(version_key, 0) + 1, None)
    logger.debug(
        f"Invalidated cached weather for {location.name if location else 'all locations'}"
    )


class WeatherSource(ABC):
    """
    Contract for weather data suppliers.

    Implementations raise WeatherSourceUnavailableError when data cannot be
    retrieved. ``certainty`` is the supplier's forecast reliability in [0, 1].
    """

    certainty: float = 1.0

    @abstractmethod
    def get_conditions(self, location: Location, at: datetime) -> WeatherConditionSet:
        """Conditions at ``location`` for time ``at``."""

    def get_route_conditions(self, locations: Sequence[Location], at: datetime) -> RouteSamples:
        """Conditions for each location in order."""
        return [(location, self.get_conditions(location, at)) for location in locations]

    def get_fresh_conditions(self, location: Location, at: datetime) -> WeatherConditionSet:
        """Conditions read from the supplier itself, never from a cache."""
        return self.get_conditions(location, at)

    def get_fresh_route_conditions(
        self,
        locations: Sequence[Location],
        at: datetime
    ) -> RouteSamples:
        return [(location, self.get_fresh_conditions(location, at)) for location in locations]


class ScenarioWeatherSource(WeatherSource):
    """
    Demo-mode source returning pre-built scenarios.

    A scenario can be set globally or for a single location by name.
    Switching scenarios drops any cached weather for the affected locations.
    """

    def __init__(self, scenario_id: str = None, certainty: float = None):
        self._lock = threading.Lock()
        self._scenario = get_scenario(
            scenario_id or getattr(settings, 'WEATHER_DEMO_SCENARIO', 'clear-skies')
        )
        self._overrides: Dict[str, DemoScenario] = {}
        if certainty is None:
            certainty = getattr(settings, 'WEATHER_SOURCE_CERTAINTY', 0.9)
        self.certainty = certainty

    @property
    def scenario_id(self) -> str:
        return self._scenario.id

    def set_scenario(self, scenario_id: str, location: Optional[Location] = None):
        """Switch the active scenario, optionally for one location only."""
        scenario = get_scenario(scenario_id)
        with self._lock:
            if location is None:
                self._scenario = scenario
                self._overrides.clear()
            else:
                self._overrides[location.name] = scenario
        invalidate_cached_weather(location)
        logger.info(
            f"Demo weather scenario set to {scenario_id}"
            + (f" for {location.name}" if location else "")
        )

    def get_conditions(self, location: Location, at: datetime) -> WeatherConditionSet:
        with self._lock:
            scenario = self._overrides.get(location.name, self._scenario)
        return scenario.build(at)


class CachedWeatherSource(WeatherSource):
    """
    Wraps another source with the Django cache.

    Entries are keyed by location and hour. A hit is returned stamped with
    the requested time. Fresh reads skip the lookup and overwrite the entry.
    """

    def __init__(self, source: WeatherSource, ttl: int = None):
        self.source = source
        self.ttl = ttl if ttl is not None else getattr(settings, 'WEATHER_CACHE_TTL', 3600)

    @property
    def certainty(self) -> float:
        return self.source.certainty

    def get_conditions(self, location: Location, at: datetime) -> WeatherConditionSet:
        cached = cache.get(self._cache_key(location, at))
        if cached is not None:
            return dataclasses.replace(WeatherConditionSet.from_dict(cached), timestamp=at)
        return self.get_fresh_conditions(location, at)

    def get_fresh_conditions(self, location: Location, at: datetime) -> WeatherConditionSet:
        conditions = self.source.get_conditions(location, at)
        cache.set(self._cache_key(location, at), conditions.to_dict(), self.ttl)
        return conditions

    def invalidate(self, location: Optional[Location] = None):
        invalidate_cached_weather(location)

    def _cache_key(self, location: Location, at: datetime) -> str:
        hour = at.replace(minute=0, second=0, microsecond=0)
        versions = cache.get_many([_version_key(None), _version_key(location)])
        return (
            f"{CACHE_KEY_PREFIX}:{_location_key(location)}:"
            f"v{versions.get(_version_key(None), 0)}.{versions.get(_version_key(location), 0)}:"
            f"{hour.isoformat()}"
        )


def get_weather_source() -> WeatherSource:
    """Build the configured weather source."""
    source_class = import_string(
        getattr(settings, 'WEATHER_SOURCE_CLASS', 'apps.core.weather.sources.ScenarioWeatherSource')
    )
    source = source_class()
    if getattr(settings, 'WEATHER_CACHE_ENABLED', True):
        source = CachedWeatherSource(source)
    return source
