# services/scheduling-service/src/apps/core/weather/__init__.py
"""
Weather Sources
"""

from .scenarios import DemoScenario, DEMO_SCENARIOS, get_scenario
from .sources import (
    WeatherSource,
    ScenarioWeatherSource,
    CachedWeatherSource,
    get_weather_source,
    invalidate_cached_weather,
)

__all__ = [
    'DemoScenario',
    'DEMO_SCENARIOS',
    'get_scenario',
    'WeatherSource',
    'ScenarioWeatherSource',
    'CachedWeatherSource',
    'get_weather_source',
    'invalidate_cached_weather',
]
