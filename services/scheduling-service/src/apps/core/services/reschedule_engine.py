# services/scheduling-service/src/apps/core/services/reschedule_engine.py
"""
Reschedule Engine

Generates ranked alternative times for bookings on weather hold.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, time, timedelta
from typing import Iterable, List, Sequence, Tuple

from django.conf import settings
from django.utils import timezone

from ..models.booking import Booking
from ..models.reschedule import (
    ForecastWindow,
    ParticipantAvailability,
    RescheduleCandidate,
)
from ..models.weather import Location, SafetyVerdict, WeatherConditionSet
from .exceptions import BookingNotOnHoldError, ForecastUnavailableError
from .safety_evaluator import SafetyEvaluator
from .scoring import CandidateScorer, LeadTimeScorer

logger = logging.getLogger(__name__)

RouteSamples = List[Tuple[Location, WeatherConditionSet]]


class RescheduleEngine:
    """
    Reschedule option generation.

    Handles:
    - Slot enumeration within the forecast horizon
    - Participant availability filtering
    - Concurrent forecast lookup and safety evaluation
    - Confidence scoring and ranking
    """

    # Upper bound on options returned regardless of configuration
    HARD_MAX_OPTIONS = 5

    def __init__(
        self,
        weather_source,
        evaluator: SafetyEvaluator,
        scorer: CandidateScorer = None,
        max_options: int = None,
        horizon_days: int = None,
        max_workers: int = None,
        timeout: float = None
    ):
        self.weather_source = weather_source
        self.evaluator = evaluator
        self.scorer = scorer or LeadTimeScorer()

        if max_options is None:
            max_options = getattr(settings, 'RESCHEDULE_MAX_OPTIONS', 3)
        self.max_options = max(1, min(max_options, self.HARD_MAX_OPTIONS))

        self.horizon = timedelta(
            days=horizon_days if horizon_days is not None
            else getattr(settings, 'RESCHEDULE_HORIZON_DAYS', 10)
        )
        self.slot_interval = timedelta(
            hours=getattr(settings, 'RESCHEDULE_SLOT_INTERVAL_HOURS', 2)
        )
        self.slot_duration = timedelta(
            hours=getattr(settings, 'RESCHEDULE_SLOT_DURATION_HOURS', 2)
        )
        self.day_start_hour = getattr(settings, 'RESCHEDULE_DAY_START_HOUR', 8)
        self.day_end_hour = getattr(settings, 'RESCHEDULE_DAY_END_HOUR', 18)
        self.max_workers = max_workers or getattr(settings, 'RESCHEDULE_MAX_WORKERS', 4)
        self.timeout = timeout if timeout is not None else getattr(
            settings, 'RESCHEDULE_GENERATION_TIMEOUT', 30
        )

    def generate_options(
        self,
        booking: Booking,
        forecast_window: ForecastWindow,
        participant_availability: Sequence[ParticipantAvailability] = (),
        now: datetime = None
    ) -> List[RescheduleCandidate]:
        """
        Generate ranked reschedule candidates for a held booking.

        Args:
            booking: Booking on weather hold
            forecast_window: Period to search, clamped to the configured horizon
            participant_availability: Free/busy data for the participants
            now: Reference time for lead-time scoring (defaults to now)

        Returns:
            Candidates sorted by priority, best first. Empty when no slot
            is safe.

        Raises:
            BookingNotOnHoldError: Booking is not on weather hold
            ForecastUnavailableError: A forecast could not be obtained in time
        """
        if not booking.is_on_hold:
            raise BookingNotOnHoldError(booking.id, booking.status.value)

        # Unknown training levels fail before any lookups
        self.evaluator.policy.for_level(booking.training_level)

        now = now or timezone.now()
        window = forecast_window.clamp(self.horizon)

        slots = [
            slot for slot in self.enumerate_slots(window, now)
            if slot != booking.scheduled_date
            and self._participants_available(participant_availability, slot)
        ]
        if not slots:
            logger.info(f"No open reschedule slots for booking {booking.id}")
            return []

        evaluations = self._evaluate_slots(booking, slots)

        # 1. Keep safe slots and score them
        scored = []
        for slot in slots:
            samples, verdict = evaluations[slot]
            if not verdict.is_safe:
                continue
            confidence = self.scorer.score(
                slot - now,
                self.weather_source.certainty,
                samples[0][1],
            )
            scored.append((slot, confidence, samples, verdict))

        # 2. Rank by confidence, soonest first on ties
        scored.sort(key=lambda item: (-item[1], item[0]))
        selected = scored[:self.max_options]

        # 3. Dense priorities in ranked order
        candidates = [
            RescheduleCandidate(
                booking_id=booking.id,
                date_time=slot,
                reasoning=self._build_reasoning(booking, slot, now, samples, verdict),
                weather_forecast=self._build_forecast(samples),
                priority=index,
                confidence=confidence,
            )
            for index, (slot, confidence, samples, verdict) in enumerate(selected, start=1)
        ]

        logger.info(
            f"Generated {len(candidates)} reschedule options for booking {booking.id} "
            f"from {len(slots)} slots ({len(scored)} safe)"
        )
        return candidates

    def enumerate_slots(self, window: ForecastWindow, now: datetime) -> List[datetime]:
        """Start times of daytime slots fully inside the window and after now."""
        tzinfo = window.start.tzinfo
        slots = []
        day = window.start.date()

        while day <= window.end.date():
            slot = datetime.combine(day, time(self.day_start_hour), tzinfo=tzinfo)
            day_end = datetime.combine(day, time(self.day_end_hour), tzinfo=tzinfo)

            while slot + self.slot_duration <= day_end:
                slot_end = slot + self.slot_duration
                if slot > now and window.contains(slot, slot_end):
                    slots.append(slot)
                slot += self.slot_interval

            day += timedelta(days=1)

        return slots

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def _participants_available(
        self,
        availability: Iterable[ParticipantAvailability],
        slot: datetime
    ) -> bool:
        slot_end = slot + self.slot_duration
        return all(entry.is_available(slot, slot_end) for entry in availability)

    def _evaluate_slot(
        self,
        booking: Booking,
        slot: datetime
    ) -> Tuple[RouteSamples, SafetyVerdict]:
        samples = self.weather_source.get_route_conditions(booking.route, slot)
        return samples, self.evaluator.evaluate_route(samples, booking.training_level)

    def _evaluate_slots(self, booking: Booking, slots: List[datetime]):
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                executor.submit(self._evaluate_slot, booking, slot): slot
                for slot in slots
            }
            done, not_done = wait(futures, timeout=self.timeout)

            if not_done:
                logger.warning(
                    f"Forecast lookup timed out for booking {booking.id}: "
                    f"{len(not_done)} of {len(futures)} slots pending"
                )
                raise ForecastUnavailableError(
                    f"Forecast lookup timed out after {self.timeout}s",
                    details={'booking_id': str(booking.id), 'pending_slots': len(not_done)}
                )

            results = {}
            for future in done:
                slot = futures[future]
                error = future.exception()
                if error is not None:
                    logger.warning(
                        f"Forecast unavailable for booking {booking.id} at {slot.isoformat()}: {error}"
                    )
                    raise ForecastUnavailableError(
                        f"Forecast unavailable for {slot.isoformat()}",
                        details={'booking_id': str(booking.id), 'slot': slot.isoformat()}
                    ) from error
                results[slot] = future.result()
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _build_reasoning(
        self,
        booking: Booking,
        slot: datetime,
        now: datetime,
        samples: RouteSamples,
        verdict: SafetyVerdict
    ) -> str:
        lead_hours = int((slot - now).total_seconds() // 3600)
        places = ' and '.join(location.name for location, _ in samples)
        categories = ', '.join(
            sorted({conditions.flight_category.value.upper() for _, conditions in samples})
        )
        return (
            f"{slot:%A %b %d at %H:%M}: forecast at {places} meets "
            f"{verdict.training_level.value} minima ({categories}), "
            f"{lead_hours} hours ahead with all participants available"
        )

    @staticmethod
    def _build_forecast(samples: RouteSamples) -> str:
        if len(samples) == 1:
            return samples[0][1].summary()
        return '; '.join(
            f"{location.name}: {conditions.summary()}" for location, conditions in samples
        )
