# services/scheduling-service/src/tests/unit/test_minima_policy.py
"""
Unit Tests for Minima Policy
"""

import dataclasses

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

from apps.core.constants import TrainingLevel, TRAINING_LEVEL_ORDER
from apps.core.services import (
    DEFAULT_MINIMA,
    InvalidTrainingLevelError,
    MinimaPolicy,
    WeatherMinimums,
)


class TestMinimaPolicy:
    """Tests for MinimaPolicy."""

    def test_default_table(self, policy):
        """Test default minima for each training level."""
        student = policy.for_level(TrainingLevel.STUDENT_PILOT)
        assert (student.min_visibility, student.min_ceiling, student.max_wind_speed) == (5, 3000, 10)
        assert student.allow_precipitation is False

        private = policy.for_level(TrainingLevel.PRIVATE_PILOT)
        assert (private.min_visibility, private.min_ceiling, private.max_wind_speed) == (3, 1000, 20)

        instrument = policy.for_level(TrainingLevel.INSTRUMENT_RATED)
        assert (instrument.min_visibility, instrument.min_ceiling, instrument.max_wind_speed) == (0, 0, 30)

    def test_thunderstorms_and_icing_disqualify_every_level(self, policy):
        """Test hard flags are disallowed for all levels."""
        for level in TRAINING_LEVEL_ORDER:
            minimums = policy.for_level(level)
            assert minimums.allow_thunderstorms is False
            assert minimums.allow_icing is False

    def test_minima_are_monotonic(self, policy):
        """Test minima loosen as training level increases."""
        for weaker, stronger in zip(TRAINING_LEVEL_ORDER, TRAINING_LEVEL_ORDER[1:]):
            lower = policy.for_level(weaker)
            upper = policy.for_level(stronger)
            assert upper.min_visibility <= lower.min_visibility
            assert upper.min_ceiling <= lower.min_ceiling
            assert upper.max_wind_speed >= lower.max_wind_speed

    def test_for_level_accepts_strings(self, policy):
        """Test levels can be given by value."""
        assert policy.for_level('PRIVATE_PILOT') == policy.for_level(TrainingLevel.PRIVATE_PILOT)
        assert policy.for_level('private_pilot') == policy.for_level(TrainingLevel.PRIVATE_PILOT)

    def test_unknown_level(self, policy):
        """Test unknown training level is rejected."""
        with pytest.raises(InvalidTrainingLevelError) as exc_info:
            policy.for_level('COMMERCIAL_PILOT')

        assert exc_info.value.to_dict()['error'] == 'INVALID_TRAINING_LEVEL'
        assert exc_info.value.details['training_level'] == 'COMMERCIAL_PILOT'

    def test_missing_level_rejected(self):
        """Test every training level must be configured."""
        minima = dict(DEFAULT_MINIMA)
        del minima[TrainingLevel.INSTRUMENT_RATED]

        with pytest.raises(ImproperlyConfigured, match='INSTRUMENT_RATED'):
            MinimaPolicy(minima)

    def test_non_monotonic_table_rejected(self):
        """Test a stricter advanced level is rejected."""
        minima = dict(DEFAULT_MINIMA)
        minima[TrainingLevel.PRIVATE_PILOT] = dataclasses.replace(
            DEFAULT_MINIMA[TrainingLevel.PRIVATE_PILOT], min_visibility=6
        )

        with pytest.raises(ImproperlyConfigured, match='min_visibility'):
            MinimaPolicy(minima)

    def test_stricter_flag_rejected(self):
        """Test an advanced level may not disallow what a weaker level allows."""
        minima = dict(DEFAULT_MINIMA)
        minima[TrainingLevel.INSTRUMENT_RATED] = dataclasses.replace(
            DEFAULT_MINIMA[TrainingLevel.INSTRUMENT_RATED], allow_precipitation=False
        )

        with pytest.raises(ImproperlyConfigured, match='allow_precipitation'):
            MinimaPolicy(minima)

    def test_from_settings(self):
        """Test policy is built from WEATHER_MINIMA."""
        minima = {
            level.value: dataclasses.asdict(DEFAULT_MINIMA[level])
            for level in TRAINING_LEVEL_ORDER
        }
        minima['PRIVATE_PILOT']['max_wind_speed'] = 25

        with override_settings(WEATHER_MINIMA=minima):
            policy = MinimaPolicy.from_settings()

        assert policy.for_level(TrainingLevel.PRIVATE_PILOT).max_wind_speed == 25

    def test_from_settings_invalid_keys(self):
        """Test unknown threshold names are a configuration error."""
        minima = {
            level.value: dataclasses.asdict(DEFAULT_MINIMA[level])
            for level in TRAINING_LEVEL_ORDER
        }
        minima['STUDENT_PILOT']['max_gust'] = 15

        with override_settings(WEATHER_MINIMA=minima):
            with pytest.raises(ImproperlyConfigured):
                MinimaPolicy.from_settings()

    def test_describe(self, policy):
        """Test human-readable minima summary."""
        description = policy.describe(TrainingLevel.STUDENT_PILOT)

        assert description.startswith('Student Pilot:')
        assert 'Visibility >= 5 mi' in description
        assert 'Ceiling >= 3000 ft' in description
        assert 'Wind <= 10 kt' in description
        assert 'no precipitation' in description

        assert 'No ceiling minimum' in policy.describe(TrainingLevel.INSTRUMENT_RATED)

    def test_policy_is_read_only(self, policy):
        """Test the minima table cannot be modified."""
        with pytest.raises(TypeError):
            policy._minima[TrainingLevel.STUDENT_PILOT] = WeatherMinimums(0, 0, 100)
