"""
API views for the trips application.
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .models import Driver, StopPoint, Trip, TripStatusError, Vehicle
from .serializers import (
    DriverSerializer,
    VehicleSerializer,
    TripSerializer,
    TripDetailSerializer,
    TripCreateSerializer,
    TripUpdateSerializer,
    TripStatusSerializer,
    TripRouteSerializer,
    SearchQuerySerializer,
    PaginationQuerySerializer,
    SearchResponseSerializer,
)
from .services import SearchCriteria, SearchOutcome, TripMatcher, TripRouteService

logger = logging.getLogger(__name__)


PAGINATION_PARAMETERS = [
    OpenApiParameter(
        name='page',
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=False,
        default=1,
        description='Page number, starting at 1'
    ),
    OpenApiParameter(
        name='limit',
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=False,
        default=10,
        description='Number of trips per page'
    ),
]


@extend_schema_view(
    list=extend_schema(summary="List all drivers", tags=['Drivers']),
    retrieve=extend_schema(summary="Get a driver", tags=['Drivers']),
    create=extend_schema(summary="Create a driver", tags=['Drivers']),
    update=extend_schema(summary="Update a driver", tags=['Drivers']),
    partial_update=extend_schema(summary="Partially update a driver", tags=['Drivers']),
    destroy=extend_schema(summary="Delete a driver", tags=['Drivers']),
)
class DriverViewSet(viewsets.ModelViewSet):
    queryset = Driver.objects.all()
    serializer_class = DriverSerializer


@extend_schema_view(
    list=extend_schema(summary="List all vehicles", tags=['Vehicles']),
    retrieve=extend_schema(summary="Get a vehicle", tags=['Vehicles']),
    create=extend_schema(summary="Create a vehicle", tags=['Vehicles']),
    update=extend_schema(summary="Update a vehicle", tags=['Vehicles']),
    partial_update=extend_schema(summary="Partially update a vehicle", tags=['Vehicles']),
    destroy=extend_schema(summary="Delete a vehicle", tags=['Vehicles']),
)
class VehicleViewSet(viewsets.ModelViewSet):
    queryset = Vehicle.objects.prefetch_related('drivers')
    serializer_class = VehicleSerializer


@extend_schema_view(
    list=extend_schema(
        summary="List all trips",
        description="Retrieve a paginated list of all trips, newest first.",
        tags=['Trips']
    ),
    retrieve=extend_schema(
        summary="Get a trip",
        description="Retrieve details of a specific trip by ID, with its stop points.",
        tags=['Trips']
    ),
    create=extend_schema(
        summary="Create a trip",
        description="Create a new PENDING trip with optional stop points. The vehicle must have at least one driver.",
        tags=['Trips'],
        responses={201: TripSerializer},
    ),
    update=extend_schema(
        summary="Update a trip",
        description="Update all fields of a trip. Supplied stop points replace the existing ones.",
        tags=['Trips'],
        responses={200: TripSerializer},
    ),
    partial_update=extend_schema(
        summary="Partially update a trip",
        description="Update specific fields of a trip. Supplied stop points replace the existing ones.",
        tags=['Trips'],
        responses={200: TripSerializer},
    ),
    destroy=extend_schema(
        summary="Delete a trip",
        description="Delete a trip and its stop points.",
        tags=['Trips']
    ),
)
class TripViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Trip operations.

    Endpoints:
    - POST /api/trips/ - Create a trip
    - GET /api/trips/ - List all trips
    - GET /api/trips/{id}/ - Retrieve a trip
    - PUT /api/trips/{id}/ - Update a trip (full)
    - PATCH /api/trips/{id}/ - Update a trip (partial)
    - DELETE /api/trips/{id}/ - Delete a trip
    - PATCH /api/trips/{id}/status/ - Change a trip's status
    - GET /api/trips/{id}/route/ - Replay a trip's route
    - GET /api/trips/by-vehicle/{vehicle_id}/ - List a vehicle's trips
    - GET /api/trips/by-driver/{driver_id}/ - List a driver's trips
    """

    queryset = Trip.objects.select_related('driver', 'vehicle').prefetch_related('stop_points')

    COORDINATE_FIELDS = (
        'departure_latitude',
        'departure_longitude',
        'arrival_latitude',
        'arrival_longitude',
    )

    def get_serializer_class(self):
        if self.action == 'create':
            return TripCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return TripUpdateSerializer
        elif self.action == 'change_status':
            return TripStatusSerializer
        elif self.action == 'route':
            return TripRouteSerializer
        return TripSerializer

    @staticmethod
    def _build_stop_points(trip, stop_points_data):
        return [
            StopPoint(trip=trip, **point)
            for point in stop_points_data
        ]

    def create(self, request, *args, **kwargs):
        """Create a new trip together with its stop points."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        stop_points_data = data.pop('stop_points', [])
        vehicle = get_object_or_404(Vehicle, pk=data.pop('vehicle'))

        if not vehicle.drivers.exists():
            return Response(
                {'error': f'No driver is assigned to vehicle {vehicle.id}'},
                status=status.HTTP_400_BAD_REQUEST
            )

        trip = Trip(**data, vehicle=vehicle, status=Trip.Status.PENDING)
        stop_points = self._build_stop_points(trip, stop_points_data)

        if 'distance' not in data:
            waypoints = TripRouteService.waypoints_for(trip, stop_points)
            trip.distance = round(TripRouteService.route_distance(waypoints), 3)

        with transaction.atomic():
            trip.save()
            for stop in stop_points:
                stop.trip = trip
            StopPoint.objects.bulk_create(stop_points)

        logger.info(f"Trip {trip.id} created with {len(stop_points)} stop points")

        response_serializer = TripSerializer(self.get_queryset().get(pk=trip.pk))
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update a trip, replacing its stop points when new ones are supplied."""
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        stop_points_data = data.pop('stop_points', None)

        if 'vehicle' in data:
            data['vehicle'] = get_object_or_404(Vehicle, pk=data['vehicle'])

        with transaction.atomic():
            for attr, value in data.items():
                setattr(instance, attr, value)
            instance.save()

            if stop_points_data:
                instance.stop_points.all().delete()
                StopPoint.objects.bulk_create(self._build_stop_points(instance, stop_points_data))

            route_changed = stop_points_data or any(field in data for field in self.COORDINATE_FIELDS)
            if route_changed and 'distance' not in data:
                waypoints = TripRouteService.waypoints_for(instance, StopPoint.objects.filter(trip=instance))
                instance.distance = round(TripRouteService.route_distance(waypoints), 3)
                instance.save(update_fields=['distance', 'date_last_updated'])

        response_serializer = TripSerializer(self.get_queryset().get(pk=instance.pk))
        return Response(response_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """Delete a trip."""
        instance = self.get_object()
        trip_id = instance.id
        instance.delete()
        return Response(
            {'message': f'Trip {trip_id} deleted successfully'},
            status=status.HTTP_200_OK
        )

    @extend_schema(
        summary="Change a trip's status",
        description="""
        Move a trip to a new status.

        - A **COMPLETED** trip can no longer change status
        - A **CANCELLED** trip can only be restarted (**STARTED**)
        """,
        tags=['Trips'],
        request=TripStatusSerializer,
        responses={200: TripSerializer},
    )
    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        trip = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data['status']
        try:
            trip.change_status(new_status)
        except TripStatusError as e:
            return Response(
                {'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(f"Trip {trip.id} moved to {new_status}")
        return Response(TripSerializer(trip).data)

    @extend_schema(
        summary="Replay a trip's route",
        description="Ordered waypoints (departure, stop points, arrival), their encoded polyline and total length in km.",
        tags=['Trips'],
        responses={200: TripRouteSerializer},
    )
    @action(detail=True, methods=['get'])
    def route(self, request, pk=None):
        trip = self.get_object()
        trip_route = TripRouteService.build(trip)
        return Response(TripRouteSerializer(trip_route).data)

    @extend_schema(summary="List a vehicle's trips", tags=['Trips'])
    @action(detail=False, methods=['get'], url_path=r'by-vehicle/(?P<vehicle_id>\d+)')
    def by_vehicle(self, request, vehicle_id=None):
        return self._paginated_list(self.get_queryset().filter(vehicle_id=vehicle_id))

    @extend_schema(summary="List a driver's trips", tags=['Trips'])
    @action(detail=False, methods=['get'], url_path=r'by-driver/(?P<driver_id>\d+)')
    def by_driver(self, request, driver_id=None):
        return self._paginated_list(self.get_queryset().filter(driver_id=driver_id))

    def _paginated_list(self, queryset):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(TripSerializer(page, many=True).data)
        return Response(TripSerializer(queryset, many=True).data)


class TripSearchView(APIView):
    """
    API view for searching trips.

    The response is always HTTP 200. Whether trips were found, none were
    found, or the search failed is carried by ``statusCode``, ``message``
    and ``data.status`` in the body.
    """

    @extend_schema(
        summary="Search trips",
        description="""
        Find trips for a rider's origin, destination, schedule and seat count.

        Matching falls back through three tiers and returns the first non-empty one:
        1. **Direct**: departure and arrival match exactly, with every supplied date/time filter
        2. **Stop points**: a stop point sits exactly on the origin or destination, with every supplied date/time filter
        3. **Nearby**: departure and arrival are each within 30 km of the origin and destination (date/time filters ignored)

        Search failures are reported with `statusCode: 500` in the body.
        """,
        tags=['Search'],
        request=SearchQuerySerializer,
        parameters=PAGINATION_PARAMETERS,
        responses={200: SearchResponseSerializer},
    )
    def post(self, request):
        """Find trips matching the rider's journey."""
        serializer = SearchQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pagination = PaginationQuerySerializer(data=request.query_params)
        pagination.is_valid(raise_exception=True)

        data = serializer.validated_data
        criteria = SearchCriteria(
            departure_latitude=data['departure_latitude'],
            departure_longitude=data['departure_longitude'],
            arrival_latitude=data['arrival_latitude'],
            arrival_longitude=data['arrival_longitude'],
            departure_date=data.get('departure_date'),
            departure_time=data.get('departure_time'),
            arrival_date=data.get('arrival_date'),
            arrival_time=data.get('arrival_time'),
            min_seats=data['available_seats'],
            page=pagination.validated_data['page'],
            limit=pagination.validated_data['limit'],
        )

        result = TripMatcher().search(criteria)

        page = result.as_page()
        page['data'] = TripDetailSerializer(result.trips, many=True).data

        status_code = 500 if result.outcome is SearchOutcome.FAILED else 200
        return Response({
            'statusCode': status_code,
            'message': result.message,
            'data': page,
        })
