"""Scheduling Service Serializers."""
import json
from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from .constants import (
    BookingStatus,
    FlightType,
    HistoryAction,
    ParticipantRole,
    TrainingLevel,
    ViolationCode,
)
from .models import (
    AvailabilityWindow,
    Booking,
    ForecastWindow,
    Location,
    ParticipantAvailability,
    RescheduleCandidate,
    WeatherConditionSet,
)


class EnumChoiceField(serializers.ChoiceField):
    """Choice field that reads and writes Enum members."""

    def __init__(self, enum_class, **kwargs):
        self.enum_class = enum_class
        super().__init__(choices=[member.value for member in enum_class], **kwargs)

    def to_internal_value(self, data):
        return self.enum_class(super().to_internal_value(data))

    def to_representation(self, value):
        return self.enum_class(value).value


class JSONStringInputMixin:
    """Accept a JSON-encoded string wherever an object is expected."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                raise serializers.ValidationError("Invalid JSON string")
        return super().to_internal_value(data)


class LocationSerializer(JSONStringInputMixin, serializers.Serializer):
    name = serializers.CharField(max_length=255)
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lon = serializers.FloatField(min_value=-180, max_value=180)

    def create(self, validated_data):
        return Location(**validated_data)


class WeatherConditionSetSerializer(serializers.Serializer):
    visibility = serializers.FloatField(min_value=0)
    ceiling = serializers.FloatField(min_value=0, allow_null=True, default=None)
    wind_speed = serializers.FloatField(min_value=0)
    wind_direction = serializers.IntegerField(
        min_value=0, max_value=359, allow_null=True, default=None
    )
    temperature = serializers.FloatField()
    humidity = serializers.FloatField(min_value=0, max_value=100)
    precipitation = serializers.BooleanField(default=False)
    thunderstorms = serializers.BooleanField(default=False)
    icing = serializers.BooleanField(default=False)
    cloud_cover = serializers.FloatField(
        min_value=0, max_value=100, allow_null=True, default=None
    )
    description = serializers.CharField(allow_blank=True, default='')
    timestamp = serializers.DateTimeField()
    flight_category = serializers.CharField(source='flight_category.value', read_only=True)

    def create(self, validated_data):
        return WeatherConditionSet(**validated_data)


class SafetyVerdictSerializer(serializers.Serializer):
    is_safe = serializers.BooleanField(read_only=True)
    violations = serializers.SerializerMethodField()
    messages = serializers.ListField(child=serializers.CharField(), read_only=True)
    reason = serializers.CharField(read_only=True)
    evaluated_at = serializers.DateTimeField(read_only=True)
    training_level = EnumChoiceField(TrainingLevel, read_only=True)

    def get_violations(self, obj):
        return [ViolationCode(code).value for code in obj.violations]


class HistoryEventSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    flight_id = serializers.UUIDField(read_only=True)
    action = EnumChoiceField(HistoryAction, read_only=True)
    changed_by = serializers.CharField(read_only=True)
    changes = serializers.JSONField(read_only=True)
    notes = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)


class BookingSerializer(serializers.Serializer):
    id = serializers.UUIDField(required=False)
    student_id = serializers.UUIDField()
    instructor_id = serializers.UUIDField()
    aircraft_id = serializers.UUIDField()
    scheduled_date = serializers.DateTimeField()
    departure_location = LocationSerializer()
    destination_location = LocationSerializer(allow_null=True, default=None)
    training_level = EnumChoiceField(TrainingLevel)
    # New bookings always start CONFIRMED
    status = EnumChoiceField(BookingStatus, read_only=True)
    flight_type = EnumChoiceField(FlightType, default=FlightType.TRAINING)
    notes = serializers.CharField(allow_blank=True, default='')
    latest_verdict = SafetyVerdictSerializer(read_only=True)
    version = serializers.IntegerField(read_only=True)

    def create(self, validated_data):
        data = dict(validated_data)
        data['departure_location'] = Location(**data['departure_location'])
        if data.get('destination_location'):
            data['destination_location'] = Location(**data['destination_location'])
        return Booking(**data)


class ForecastWindowSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, data):
        if data['end'] <= data['start']:
            raise serializers.ValidationError("End time must be after start time")
        return data

    def create(self, validated_data):
        return ForecastWindow(**validated_data)


class AvailabilityWindowSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, data):
        if data['end'] <= data['start']:
            raise serializers.ValidationError("End time must be after start time")
        return data


class ParticipantAvailabilitySerializer(JSONStringInputMixin, serializers.Serializer):
    participant_id = serializers.UUIDField()
    role = EnumChoiceField(ParticipantRole)
    free = AvailabilityWindowSerializer(many=True, default=list)
    busy = AvailabilityWindowSerializer(many=True, default=list)

    def create(self, validated_data):
        return build_participant_availability(validated_data)


def build_participant_availability(data) -> ParticipantAvailability:
    return ParticipantAvailability(
        participant_id=data['participant_id'],
        role=data['role'],
        free=[AvailabilityWindow(**window) for window in data.get('free', [])],
        busy=[AvailabilityWindow(**window) for window in data.get('busy', [])],
    )


class RescheduleOptionsRequestSerializer(serializers.Serializer):
    """
    Input for reschedule option generation.

    Without a forecast window the search runs from now to the configured
    horizon.
    """
    booking_id = serializers.UUIDField()
    forecast_window = ForecastWindowSerializer(required=False)
    participant_availability = ParticipantAvailabilitySerializer(many=True, default=list)

    def create(self, validated_data):
        window = validated_data.get('forecast_window')
        if window:
            forecast_window = ForecastWindow(**window)
        else:
            now = timezone.now()
            horizon = timedelta(days=getattr(settings, 'RESCHEDULE_HORIZON_DAYS', 10))
            forecast_window = ForecastWindow(start=now, end=now + horizon)

        return {
            'booking_id': validated_data['booking_id'],
            'forecast_window': forecast_window,
            'participant_availability': [
                build_participant_availability(entry)
                for entry in validated_data['participant_availability']
            ],
        }


class RescheduleCandidateSerializer(serializers.Serializer):
    booking_id = serializers.UUIDField()
    date_time = serializers.DateTimeField()
    reasoning = serializers.CharField()
    weather_forecast = serializers.CharField()
    priority = serializers.IntegerField(min_value=1)
    confidence = serializers.FloatField(min_value=0, max_value=1)

    def create(self, validated_data):
        return RescheduleCandidate(**validated_data)
