# services/scheduling-service/src/apps/core/weather/scenarios.py
"""
Demo Weather Scenarios

Pre-built conditions for demo mode and conflict-detection testing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from ..constants import TrainingLevel
from ..models.weather import WeatherConditionSet


@dataclass(frozen=True)
class DemoScenario:
    id: str
    name: str
    description: str
    conditions: Dict[str, Any]
    affects_training_levels: Tuple[TrainingLevel, ...] = ()

    def build(self, at: datetime) -> WeatherConditionSet:
        """Conditions for this scenario stamped with ``at``."""
        return WeatherConditionSet(timestamp=at, **self.conditions)


DEMO_SCENARIOS = {
    'clear-skies': DemoScenario(
        id='clear-skies',
        name='Clear Skies',
        description='Perfect weather conditions - suitable for all training levels',
        conditions={
            'visibility': 10,
            'ceiling': 15000,
            'wind_speed': 5,
            'wind_direction': 180,
            'temperature': 72,
            'humidity': 45,
            'cloud_cover': 0,
            'description': 'Clear skies, excellent visibility',
        },
    ),
    'student-conflict': DemoScenario(
        id='student-conflict',
        name='Student Pilot Conflict',
        description='Weather conditions that violate Student Pilot minimums',
        conditions={
            'visibility': 3,
            'ceiling': 1200,
            'wind_speed': 15,
            'wind_direction': 270,
            'temperature': 65,
            'humidity': 80,
            'precipitation': True,
            'cloud_cover': 60,
            'description': 'Reduced visibility, clouds, light rain, moderate winds',
        },
        affects_training_levels=(TrainingLevel.STUDENT_PILOT,),
    ),
    'private-conflict': DemoScenario(
        id='private-conflict',
        name='Private Pilot Conflict',
        description='Weather conditions that violate Private Pilot minimums but OK for Instrument Rated',
        conditions={
            'visibility': 2,
            'ceiling': 500,
            'wind_speed': 12,
            'wind_direction': 200,
            'temperature': 60,
            'humidity': 85,
            'precipitation': True,
            'cloud_cover': 80,
            'description': 'Low visibility, low ceiling, precipitation - IMC conditions',
        },
        affects_training_levels=(
            TrainingLevel.STUDENT_PILOT,
            TrainingLevel.PRIVATE_PILOT,
        ),
    ),
    'instrument-conflict': DemoScenario(
        id='instrument-conflict',
        name='Instrument Rated Conflict',
        description='Severe weather conditions that violate even Instrument Rated minimums',
        conditions={
            'visibility': 1,
            'ceiling': 200,
            'wind_speed': 25,
            'wind_direction': 180,
            'temperature': 45,
            'humidity': 95,
            'precipitation': True,
            'thunderstorms': True,
            'icing': True,
            'cloud_cover': 100,
            'description': 'Severe weather with thunderstorms and icing',
        },
        affects_training_levels=(
            TrainingLevel.STUDENT_PILOT,
            TrainingLevel.PRIVATE_PILOT,
            TrainingLevel.INSTRUMENT_RATED,
        ),
    ),
    'marginal': DemoScenario(
        id='marginal',
        name='Marginal Conditions',
        description='Borderline weather - may or may not be safe depending on exact conditions',
        conditions={
            'visibility': 3.5,
            'ceiling': 1100,
            'wind_speed': 19,
            'wind_direction': 220,
            'temperature': 68,
            'humidity': 70,
            'cloud_cover': 30,
            'description': 'Marginal VFR conditions - borderline acceptable',
        },
        affects_training_levels=(TrainingLevel.STUDENT_PILOT,),
    ),
}


def get_scenario(scenario_id: str) -> DemoScenario:
    try:
        return DEMO_SCENARIOS[scenario_id]
    except KeyError:
        raise ValueError(f"Demo scenario not found: {scenario_id}")

