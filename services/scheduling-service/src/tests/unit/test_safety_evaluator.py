# services/scheduling-service/src/tests/unit/test_safety_evaluator.py
"""
Unit Tests for Safety Evaluator
"""

import pytest

from apps.core.constants import TrainingLevel, ViolationCode
from apps.core.services import InvalidTrainingLevelError


class TestSafetyEvaluator:
    """Tests for SafetyEvaluator.evaluate."""

    def test_clear_conditions_are_safe(self, evaluator, make_conditions):
        """Test clear skies are safe for every level."""
        conditions = make_conditions()

        for level in TrainingLevel:
            verdict = evaluator.evaluate(conditions, level)
            assert verdict.is_safe is True
            assert verdict.violations == ()
            assert verdict.reason == f"Weather conditions are safe for {level.value}"

    def test_low_visibility_and_ceiling_for_student(self, evaluator, make_conditions):
        """Test all soft violations are reported, not just the first."""
        conditions = make_conditions(visibility=2, ceiling=800, wind_speed=10)

        verdict = evaluator.evaluate(conditions, TrainingLevel.STUDENT_PILOT)

        assert verdict.is_safe is False
        assert verdict.violations == (
            ViolationCode.VISIBILITY_BELOW_MINIMUM,
            ViolationCode.CEILING_BELOW_MINIMUM,
        )
        assert verdict.reason == (
            "Visibility 2 mi is below minimum of 5 mi; "
            "Ceiling 800 ft is below minimum of 3000 ft"
        )

    def test_thunderstorms_for_private_pilot(self, evaluator, make_conditions):
        """Test thunderstorms disqualify regardless of other values."""
        conditions = make_conditions(thunderstorms=True)

        verdict = evaluator.evaluate(conditions, TrainingLevel.PRIVATE_PILOT)

        assert verdict.is_safe is False
        assert ViolationCode.THUNDERSTORMS_PRESENT in verdict.violations
        assert verdict.reason == "Thunderstorms present"

    def test_hard_flags_short_circuit(self, evaluator, make_conditions):
        """Test hard flags suppress soft threshold checks."""
        conditions = make_conditions(
            visibility=1, ceiling=200, wind_speed=25,
            precipitation=True, thunderstorms=True, icing=True,
        )

        verdict = evaluator.evaluate(conditions, TrainingLevel.INSTRUMENT_RATED)

        assert verdict.violations == (
            ViolationCode.THUNDERSTORMS_PRESENT,
            ViolationCode.ICING_PRESENT,
        )
        assert verdict.reason == "Thunderstorms present; Icing conditions present"

    def test_icing_disqualifies_instrument_rated(self, evaluator, make_conditions):
        verdict = evaluator.evaluate(make_conditions(icing=True), TrainingLevel.INSTRUMENT_RATED)

        assert verdict.is_safe is False
        assert verdict.violations == (ViolationCode.ICING_PRESENT,)

    def test_wind_at_maximum_is_allowed(self, evaluator, make_conditions):
        """Test wind equal to the maximum is within limits."""
        verdict = evaluator.evaluate(make_conditions(wind_speed=10), TrainingLevel.STUDENT_PILOT)
        assert verdict.is_safe is True

        verdict = evaluator.evaluate(make_conditions(wind_speed=10.5), TrainingLevel.STUDENT_PILOT)
        assert verdict.violations == (ViolationCode.WIND_EXCEEDS_MAXIMUM,)
        assert verdict.reason == "Wind speed 10.5 kt exceeds maximum of 10 kt"

    def test_unlimited_ceiling_never_violates(self, evaluator, make_conditions):
        """Test a missing ceiling means unlimited, not unknown."""
        verdict = evaluator.evaluate(make_conditions(ceiling=None), TrainingLevel.STUDENT_PILOT)

        assert verdict.is_safe is True

    def test_precipitation_only_for_student(self, evaluator, make_conditions):
        """Test precipitation is disallowed for student pilots only."""
        conditions = make_conditions(precipitation=True)

        student = evaluator.evaluate(conditions, TrainingLevel.STUDENT_PILOT)
        private = evaluator.evaluate(conditions, TrainingLevel.PRIVATE_PILOT)

        assert student.violations == (ViolationCode.PRECIPITATION_NOT_ALLOWED,)
        assert student.reason == "Precipitation not allowed for STUDENT_PILOT"
        assert private.is_safe is True

    def test_marginal_conditions_affect_student_only(self, evaluator, make_conditions):
        conditions = make_conditions(visibility=3.5, ceiling=1100, wind_speed=19)

        assert evaluator.evaluate(conditions, TrainingLevel.STUDENT_PILOT).is_safe is False
        assert evaluator.evaluate(conditions, TrainingLevel.PRIVATE_PILOT).is_safe is True
        assert evaluator.evaluate(conditions, TrainingLevel.INSTRUMENT_RATED).is_safe is True

    def test_evaluate_is_deterministic(self, evaluator, make_conditions):
        """Test identical inputs give identical verdicts."""
        conditions = make_conditions(visibility=2, ceiling=800, wind_speed=22, precipitation=True)

        first = evaluator.evaluate(conditions, TrainingLevel.PRIVATE_PILOT)
        second = evaluator.evaluate(conditions, 'PRIVATE_PILOT')

        assert first == second
        assert first.evaluated_at == conditions.timestamp

    def test_unknown_training_level(self, evaluator, make_conditions):
        with pytest.raises(InvalidTrainingLevelError):
            evaluator.evaluate(make_conditions(), 'ASTRONAUT')


class TestRouteEvaluation:
    """Tests for SafetyEvaluator.evaluate_route."""

    def test_single_location_matches_evaluate(self, evaluator, make_conditions, departure):
        conditions = make_conditions(visibility=2)

        route = evaluator.evaluate_route([(departure, conditions)], TrainingLevel.STUDENT_PILOT)

        assert route == evaluator.evaluate(conditions, TrainingLevel.STUDENT_PILOT)

    def test_unsafe_destination_makes_route_unsafe(
        self, evaluator, make_conditions, departure, destination
    ):
        """Test any unsafe location fails the whole route."""
        samples = [
            (departure, make_conditions()),
            (destination, make_conditions(visibility=2, wind_speed=25)),
        ]

        verdict = evaluator.evaluate_route(samples, TrainingLevel.PRIVATE_PILOT)

        assert verdict.is_safe is False
        assert verdict.violations == (
            ViolationCode.VISIBILITY_BELOW_MINIMUM,
            ViolationCode.WIND_EXCEEDS_MAXIMUM,
        )
        assert verdict.reason.startswith('KSQL: ')
        assert 'KPAO' not in verdict.reason

    def test_violations_are_ordered_union(
        self, evaluator, make_conditions, departure, destination
    ):
        samples = [
            (departure, make_conditions(wind_speed=25)),
            (destination, make_conditions(visibility=2, wind_speed=25)),
        ]

        verdict = evaluator.evaluate_route(samples, TrainingLevel.PRIVATE_PILOT)

        assert verdict.violations == (
            ViolationCode.WIND_EXCEEDS_MAXIMUM,
            ViolationCode.VISIBILITY_BELOW_MINIMUM,
        )
        assert len(verdict.messages) == 3

    def test_safe_route(self, evaluator, make_conditions, departure, destination):
        samples = [(departure, make_conditions()), (destination, make_conditions())]

        verdict = evaluator.evaluate_route(samples, TrainingLevel.STUDENT_PILOT)

        assert verdict.is_safe is True
        assert verdict.reason == "Weather conditions are safe for STUDENT_PILOT"

    def test_empty_route_rejected(self, evaluator):
        with pytest.raises(ValueError):
            evaluator.evaluate_route([], TrainingLevel.STUDENT_PILOT)
