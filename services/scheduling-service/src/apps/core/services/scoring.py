# services/scheduling-service/src/apps/core/services/scoring.py
"""
Candidate Scoring

Confidence strategies for reschedule candidates.
"""

from abc import ABC, abstractmethod
from datetime import timedelta

from django.conf import settings

from ..models.weather import WeatherConditionSet


class CandidateScorer(ABC):
    """Scores a safe reschedule slot with a confidence in [0, 1]."""

    @abstractmethod
    def score(
        self,
        lead_time: timedelta,
        certainty: float,
        conditions: WeatherConditionSet
    ) -> float:
        """
        Args:
            lead_time: Time between now and the slot start
            certainty: Forecast-source certainty in [0, 1]
            conditions: Departure forecast for the slot
        """


class LeadTimeScorer(CandidateScorer):
    """
    Confidence decays by half every ``half_life_hours`` of lead time.

    confidence = certainty * 0.5 ** (lead_hours / half_life_hours)
    """

    def __init__(self, half_life_hours: float = None):
        if half_life_hours is None:
            half_life_hours = getattr(settings, 'RESCHEDULE_SCORER_HALF_LIFE_HOURS', 72)
        if half_life_hours <= 0:
            raise ValueError("half_life_hours must be positive")
        self.half_life_hours = float(half_life_hours)

    def score(
        self,
        lead_time: timedelta,
        certainty: float,
        conditions: WeatherConditionSet
    ) -> float:
        lead_hours = max(lead_time.total_seconds() / 3600, 0.0)
        certainty = min(max(certainty, 0.0), 1.0)
        confidence = certainty * 0.5 ** (lead_hours / self.half_life_hours)
        return round(min(max(confidence, 0.0), 1.0), 4)
