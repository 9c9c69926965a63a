"""
Serializers for the trips API.
"""

from django.conf import settings
from rest_framework import serializers
from .models import Driver, StopPoint, Trip, Vehicle


TIME_OF_DAY_REGEX = r'^([01]\d|2[0-3]):([0-5]\d)$'


def validate_latitude(value):
    if not -90 <= value <= 90:
        raise serializers.ValidationError("Latitude must be between -90 and 90")
    return value


def validate_longitude(value):
    if not -180 <= value <= 180:
        raise serializers.ValidationError("Longitude must be between -180 and 180")
    return value


class DriverSerializer(serializers.ModelSerializer):

    class Meta:
        model = Driver
        fields = ['id', 'name', 'phone_number', 'date_added', 'date_last_updated']
        read_only_fields = ['id', 'date_added', 'date_last_updated']


class VehicleSerializer(serializers.ModelSerializer):

    class Meta:
        model = Vehicle
        fields = [
            'id',
            'name',
            'brand',
            'model',
            'license_plate',
            'capacity',
            'drivers',
            'date_added',
            'date_last_updated',
        ]
        read_only_fields = ['id', 'date_added', 'date_last_updated']


class StopPointSerializer(serializers.ModelSerializer):
    """Serializer for a trip's stop point, nested in trip payloads."""

    latitude = serializers.FloatField(validators=[validate_latitude])
    longitude = serializers.FloatField(validators=[validate_longitude])

    class Meta:
        model = StopPoint
        fields = ['id', 'label', 'latitude', 'longitude', 'order']
        read_only_fields = ['id']


class TripSerializer(serializers.ModelSerializer):
    """Serializer for Trip model - used for list and retrieve operations."""

    stop_points = StopPointSerializer(many=True, read_only=True)

    class Meta:
        model = Trip
        fields = [
            'id',
            'driver',
            'vehicle',
            'departure',
            'departure_latitude',
            'departure_longitude',
            'arrival',
            'arrival_latitude',
            'arrival_longitude',
            'departure_date',
            'departure_time',
            'estimated_arrival_date',
            'arrival_time',
            'description',
            'instructions',
            'status',
            'distance',
            'available_seats',
            'price',
            'stop_points',
            'date_added',
            'date_last_updated',
        ]
        read_only_fields = fields


class TripDetailSerializer(TripSerializer):
    """Trip with its driver and vehicle expanded, as returned by search."""

    driver = DriverSerializer(read_only=True)
    vehicle = VehicleSerializer(read_only=True)


class TripCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating a new trip with its stop points."""

    stop_points = StopPointSerializer(many=True, required=False)
    departure_latitude = serializers.FloatField(validators=[validate_latitude])
    departure_longitude = serializers.FloatField(validators=[validate_longitude])
    arrival_latitude = serializers.FloatField(validators=[validate_latitude])
    arrival_longitude = serializers.FloatField(validators=[validate_longitude])
    departure_time = serializers.RegexField(
        TIME_OF_DAY_REGEX,
        required=False,
        allow_blank=True,
        error_messages={'invalid': 'Invalid departure time (format HH:MM)'}
    )
    arrival_time = serializers.RegexField(
        TIME_OF_DAY_REGEX,
        required=False,
        allow_blank=True,
        error_messages={'invalid': 'Invalid arrival time (format HH:MM)'}
    )
    distance = serializers.FloatField(required=False, min_value=0)
    # Resolved by the view so that an unknown vehicle yields a 404
    vehicle = serializers.IntegerField(min_value=1)

    class Meta:
        model = Trip
        fields = [
            'driver',
            'vehicle',
            'departure',
            'departure_latitude',
            'departure_longitude',
            'arrival',
            'arrival_latitude',
            'arrival_longitude',
            'departure_date',
            'departure_time',
            'estimated_arrival_date',
            'arrival_time',
            'description',
            'instructions',
            'distance',
            'available_seats',
            'price',
            'stop_points',
        ]


class TripUpdateSerializer(TripCreateSerializer):
    """Serializer for updating a trip; supplied stop points replace the old ones."""

    def get_fields(self):
        fields = super().get_fields()
        for field in fields.values():
            field.required = False
        return fields


class TripStatusSerializer(serializers.Serializer):
    """Serializer for a trip status change."""

    status = serializers.ChoiceField(choices=Trip.Status.choices)


class SearchQuerySerializer(serializers.Serializer):
    """Serializer for trip search criteria."""

    departure_latitude = serializers.FloatField(required=True, validators=[validate_latitude])
    departure_longitude = serializers.FloatField(required=True, validators=[validate_longitude])
    arrival_latitude = serializers.FloatField(required=True, validators=[validate_latitude])
    arrival_longitude = serializers.FloatField(required=True, validators=[validate_longitude])
    departure_date = serializers.DateField(required=False)
    departure_time = serializers.RegexField(
        TIME_OF_DAY_REGEX,
        required=False,
        error_messages={'invalid': 'Invalid departure time (format HH:MM)'}
    )
    arrival_date = serializers.DateField(required=False)
    arrival_time = serializers.RegexField(
        TIME_OF_DAY_REGEX,
        required=False,
        error_messages={'invalid': 'Invalid arrival time (format HH:MM)'}
    )
    available_seats = serializers.IntegerField(default=1, min_value=1)


class PaginationQuerySerializer(serializers.Serializer):
    """Serializer for page/limit query parameters."""

    page = serializers.IntegerField(default=1, min_value=1)
    limit = serializers.IntegerField(
        default=lambda: settings.TRIP_SEARCH_DEFAULT_PAGE_SIZE,
        min_value=1
    )


class SearchPageSerializer(serializers.Serializer):
    status = serializers.BooleanField()
    total = serializers.IntegerField()
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    data = TripDetailSerializer(many=True)


class SearchResponseSerializer(serializers.Serializer):
    """Serializer for the complete search response."""

    statusCode = serializers.IntegerField()
    message = serializers.CharField()
    data = SearchPageSerializer()


class WaypointSerializer(serializers.Serializer):
    label = serializers.CharField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    kind = serializers.CharField()
    order = serializers.IntegerField(allow_null=True)


class TripRouteSerializer(serializers.Serializer):
    """Serializer for a trip's replayable route."""

    trip_id = serializers.IntegerField()
    waypoints = WaypointSerializer(many=True)
    route_geometry = serializers.CharField()
    distance_km = serializers.FloatField()
