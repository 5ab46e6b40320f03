# services/scheduling-service/src/apps/core/services/safety_evaluator.py
"""
Safety Evaluator

Applies a MinimaPolicy to weather samples and produces safety verdicts.
"""

from typing import List, Sequence, Tuple, Union

from ..constants import TrainingLevel, ViolationCode
from ..models.weather import Location, SafetyVerdict, WeatherConditionSet
from .minima_policy import MinimaPolicy, parse_training_level


class SafetyEvaluator:
    """
    Go/no-go weather judgment for a training level.

    Evaluation is a pure function of the sample, the level and the injected
    policy. Hard flags (thunderstorms, icing) short-circuit the check; soft
    thresholds are all evaluated so the verdict lists every violation.
    """

    def __init__(self, policy: MinimaPolicy):
        self.policy = policy

    def evaluate(
        self,
        conditions: WeatherConditionSet,
        training_level: Union[str, TrainingLevel]
    ) -> SafetyVerdict:
        """Evaluate one weather sample against the minima for a level."""
        level = parse_training_level(training_level)
        minimums = self.policy.for_level(level)

        # Hard-disqualifying flags
        violations = []
        if conditions.thunderstorms and not minimums.allow_thunderstorms:
            violations.append((ViolationCode.THUNDERSTORMS_PRESENT, "Thunderstorms present"))
        if conditions.icing and not minimums.allow_icing:
            violations.append((ViolationCode.ICING_PRESENT, "Icing conditions present"))
        if violations:
            return self._verdict(conditions, level, violations)

        # Soft thresholds
        if conditions.visibility < minimums.min_visibility:
            violations.append((
                ViolationCode.VISIBILITY_BELOW_MINIMUM,
                f"Visibility {conditions.visibility:g} mi is below minimum of "
                f"{minimums.min_visibility:g} mi",
            ))

        # No ceiling layer means unlimited
        if conditions.ceiling is not None and conditions.ceiling < minimums.min_ceiling:
            violations.append((
                ViolationCode.CEILING_BELOW_MINIMUM,
                f"Ceiling {conditions.ceiling:g} ft is below minimum of "
                f"{minimums.min_ceiling:g} ft",
            ))

        if conditions.wind_speed > minimums.max_wind_speed:
            violations.append((
                ViolationCode.WIND_EXCEEDS_MAXIMUM,
                f"Wind speed {conditions.wind_speed:g} kt exceeds maximum of "
                f"{minimums.max_wind_speed:g} kt",
            ))

        if conditions.precipitation and not minimums.allow_precipitation:
            violations.append((
                ViolationCode.PRECIPITATION_NOT_ALLOWED,
                f"Precipitation not allowed for {level.value}",
            ))

        return self._verdict(conditions, level, violations)

    def evaluate_route(
        self,
        samples: Sequence[Tuple[Location, WeatherConditionSet]],
        training_level: Union[str, TrainingLevel]
    ) -> SafetyVerdict:
        """
        Evaluate every location on a route, departure first.

        The route is unsafe if any location is unsafe. Violations are the
        ordered union across locations and each unsafe location's reason is
        prefixed with its name.
        """
        if not samples:
            raise ValueError("Route evaluation needs at least one location")

        level = parse_training_level(training_level)
        if len(samples) == 1:
            return self.evaluate(samples[0][1], level)

        violations: List[ViolationCode] = []
        messages: List[str] = []
        reasons: List[str] = []

        for location, conditions in samples:
            verdict = self.evaluate(conditions, level)
            if verdict.is_safe:
                continue
            for code in verdict.violations:
                if code not in violations:
                    violations.append(code)
            messages.extend(f"{location.name}: {message}" for message in verdict.messages)
            reasons.append(f"{location.name}: {verdict.reason}")

        return SafetyVerdict(
            is_safe=not violations,
            reason="; ".join(reasons) if reasons else self._safe_reason(level),
            evaluated_at=samples[0][1].timestamp,
            training_level=level,
            violations=tuple(violations),
            messages=tuple(messages),
        )

    def _verdict(
        self,
        conditions: WeatherConditionSet,
        level: TrainingLevel,
        violations: List[Tuple[ViolationCode, str]]
    ) -> SafetyVerdict:
        messages = tuple(message for _, message in violations)
        return SafetyVerdict(
            is_safe=not violations,
            reason="; ".join(messages) if messages else self._safe_reason(level),
            evaluated_at=conditions.timestamp,
            training_level=level,
            violations=tuple(code for code, _ in violations),
            messages=messages,
        )

    @staticmethod
    def _safe_reason(level: TrainingLevel) -> str:
        return f"Weather conditions are safe for {level.value}"
