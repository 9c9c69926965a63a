"""
Tests for the trips application.

Covers:
- Trip, stop point and status management
- Distance and pagination helpers
- Tiered trip search (service and API)
- Route replay
"""

import math
from datetime import date
from unittest.mock import patch

import polyline
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status

from .models import Driver, StopPoint, Trip, TripStatusError, Vehicle
from .services.distance import DistanceService
from .services.matching import SearchCriteria, SearchOutcome, TripMatcher
from .services.pagination import paginate
from .services.route import TripRouteService
from .services.store import TripFilter, TripStore, TripStoreError


PARIS = (48.8566, 2.3522)
LYON = (45.7640, 4.8357)
TRIP_DATE = date(2025, 6, 7)


def km_to_latitude_degrees(km):
    """Latitude offset covering ``km`` along a meridian."""
    return math.degrees(km / DistanceService.EARTH_RADIUS_KM)


def make_trip(departure=PARIS, arrival=LYON, stop_points=(), **kwargs):
    fields = {
        'departure': 'Paris',
        'departure_latitude': departure[0],
        'departure_longitude': departure[1],
        'arrival': 'Lyon',
        'arrival_latitude': arrival[0],
        'arrival_longitude': arrival[1],
        'departure_date': TRIP_DATE,
        'available_seats': 3,
    }
    fields.update(kwargs)
    trip = Trip.objects.create(**fields)
    for order, (lat, lon) in enumerate(stop_points, start=1):
        StopPoint.objects.create(trip=trip, latitude=lat, longitude=lon, order=order)
    return trip


def make_criteria(origin=PARIS, destination=LYON, **kwargs):
    return SearchCriteria(
        departure_latitude=origin[0],
        departure_longitude=origin[1],
        arrival_latitude=destination[0],
        arrival_longitude=destination[1],
        **kwargs
    )


class TripModelTests(TestCase):
    """Tests for the Trip model."""

    def test_create_trip(self):
        """Test creating a trip."""
        trip = make_trip()

        self.assertIsNotNone(trip.id)
        self.assertEqual(trip.available_seats, 3)
        self.assertEqual(trip.status, Trip.Status.PENDING)
        self.assertIsNotNone(trip.date_added)

    def test_trip_string_representation(self):
        trip = make_trip()

        self.assertIn("Trip", str(trip))
        self.assertIn("48.8566", str(trip))

    def test_coords_properties(self):
        trip = Trip(
            departure_latitude=48.8566, departure_longitude=2.3522,
            arrival_latitude=45.7640, arrival_longitude=4.8357,
        )
        self.assertEqual(trip.departure_coords, PARIS)
        self.assertEqual(trip.arrival_coords, LYON)
        self.assertTrue(trip.has_coordinates)

    def test_missing_coordinate(self):
        trip = Trip(departure_latitude=48.8566, departure_longitude=2.3522, arrival_latitude=None)
        self.assertFalse(trip.has_coordinates)

    def test_stop_points_ordered(self):
        trip = make_trip()
        StopPoint.objects.create(trip=trip, latitude=46.0, longitude=4.0, order=2)
        StopPoint.objects.create(trip=trip, latitude=47.0, longitude=3.0, order=1)

        self.assertEqual([s.order for s in trip.stop_points.all()], [1, 2])


class TripStatusTests(TestCase):
    """Tests for trip status transitions."""

    def test_pending_trip_can_start(self):
        trip = make_trip()
        trip.change_status(Trip.Status.STARTED)

        trip.refresh_from_db()
        self.assertEqual(trip.status, Trip.Status.STARTED)

    def test_completed_trip_is_frozen(self):
        trip = make_trip(status=Trip.Status.COMPLETED)

        with self.assertRaises(TripStatusError):
            trip.change_status(Trip.Status.STARTED)

        trip.refresh_from_db()
        self.assertEqual(trip.status, Trip.Status.COMPLETED)

    def test_cancelled_trip_can_only_restart(self):
        trip = make_trip(status=Trip.Status.CANCELLED)

        with self.assertRaises(TripStatusError):
            trip.change_status(Trip.Status.VALIDATED)

        trip.change_status(Trip.Status.STARTED)
        self.assertEqual(trip.status, Trip.Status.STARTED)


class DistanceServiceTests(TestCase):
    """Tests for distance calculation service."""

    def test_haversine_distance_same_point(self):
        """Test distance between same point is zero."""
        distance = DistanceService.haversine_distance(*PARIS, *PARIS)
        self.assertEqual(distance, 0)

    def test_haversine_distance_symmetry(self):
        self.assertEqual(
            DistanceService.haversine_distance(*PARIS, *LYON),
            DistanceService.haversine_distance(*LYON, *PARIS),
        )

    def test_haversine_distance_known_points(self):
        """Test distance calculation with known points."""
        # Paris to Lyon is approximately 392km as the crow flies
        distance = DistanceService.haversine_distance(*PARIS, *LYON)
        self.assertGreater(distance, 380)
        self.assertLess(distance, 400)

    def test_haversine_distance_along_meridian(self):
        distance = DistanceService.haversine_distance(45.0, 4.0, 45.0 + km_to_latitude_degrees(30), 4.0)
        self.assertAlmostEqual(distance, 30.0, places=6)

    def test_haversine_distance_antipodal_points(self):
        distance = DistanceService.haversine_distance(0.08, 0.0, -0.08, 180.0)
        self.assertAlmostEqual(distance, math.pi * DistanceService.EARTH_RADIUS_KM, places=3)

    def test_route_distance(self):
        self.assertEqual(DistanceService.route_distance([]), 0.0)
        self.assertEqual(DistanceService.route_distance([PARIS]), 0.0)
        self.assertAlmostEqual(
            DistanceService.route_distance([PARIS, LYON]),
            DistanceService.haversine_distance(*PARIS, *LYON),
        )

    def test_route_distance_via_stop(self):
        dijon = (47.3220, 5.0415)
        direct = DistanceService.route_distance([PARIS, LYON])
        via_dijon = DistanceService.route_distance([PARIS, dijon, LYON])
        self.assertGreater(via_dijon, direct)


class PaginateTests(TestCase):
    """Tests for in-memory pagination."""

    def test_middle_page(self):
        page = paginate(list(range(12)), page=2, limit=5)

        self.assertEqual(page['total'], 12)
        self.assertEqual(page['page'], 2)
        self.assertEqual(page['limit'], 5)
        self.assertEqual(page['data'], [5, 6, 7, 8, 9])

    def test_last_partial_page(self):
        page = paginate(list(range(12)), page=3, limit=5)
        self.assertEqual(page['data'], [10, 11])

    def test_page_past_the_end(self):
        page = paginate(list(range(12)), page=4, limit=5)

        self.assertEqual(page['data'], [])
        self.assertEqual(page['total'], 12)

    def test_empty(self):
        self.assertEqual(paginate([], 1, 10), {'total': 0, 'page': 1, 'limit': 10, 'data': []})


class TripStoreTests(TestCase):
    """Tests for trip store queries."""

    def setUp(self):
        self.store = TripStore()

    def test_seat_filter(self):
        make_trip(available_seats=1)
        roomy = make_trip(available_seats=4)

        trips = self.store.find_trips(TripFilter(min_seats=2))
        self.assertEqual([t.id for t in trips], [roomy.id])

    def test_unset_filters_are_wildcards(self):
        make_trip(departure_time='08:30')
        make_trip(departure_time='17:00')

        self.assertEqual(len(self.store.find_trips(TripFilter())), 2)

    def test_exact_time_filter(self):
        morning = make_trip(departure_time='08:30')
        make_trip(departure_time='08:31')

        trips = self.store.find_trips(TripFilter(departure_time='08:30'))
        self.assertEqual([t.id for t in trips], [morning.id])

    def test_stop_point_filter_returns_each_trip_once(self):
        trip = make_trip(departure=(49.0, 2.5), stop_points=[PARIS, LYON])
        make_trip(departure=(49.0, 2.5), stop_points=[(47.0, 3.0)])

        trips = self.store.find_trips(TripFilter(stop_points_near=(PARIS, LYON)))
        self.assertEqual([t.id for t in trips], [trip.id])

    def test_ordering(self):
        later = make_trip(departure_date=date(2025, 6, 8))
        early = make_trip(departure_date=date(2025, 6, 7), departure_time='07:00')
        earliest = make_trip(departure_date=date(2025, 6, 7), departure_time='06:00')

        trips = self.store.find_trips(TripFilter())
        self.assertEqual([t.id for t in trips], [earliest.id, early.id, later.id])

    @patch.object(TripStore, '_base_queryset', side_effect=DatabaseError("database is down"))
    def test_database_error_is_wrapped(self, mock_queryset):
        with self.assertRaises(TripStoreError) as context:
            self.store.find_trips(TripFilter())

        self.assertIn("database is down", str(context.exception))


class TripMatcherTests(TestCase):
    """Tests for the tiered trip search."""

    def setUp(self):
        self.matcher = TripMatcher(radius_km=30)

    def test_strict_match(self):
        """An exact departure/arrival match is returned as a direct trip."""
        trip = make_trip(available_seats=3)

        result = self.matcher.search(make_criteria(min_seats=2))

        self.assertEqual(result.outcome, SearchOutcome.FOUND)
        self.assertEqual(result.tier, TripMatcher.STRICT)
        self.assertEqual(result.message, 'Direct trips found')
        self.assertEqual([t.id for t in result.trips], [trip.id])

    def test_stop_point_match(self):
        trip = make_trip(departure=(49.5, 1.0), arrival=(44.0, 6.0), stop_points=[PARIS])

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.tier, TripMatcher.STOP_POINT)
        self.assertEqual(result.message, 'Trips found via stop points')
        self.assertEqual([t.id for t in result.trips], [trip.id])

    def test_stop_point_match_on_destination(self):
        trip = make_trip(departure=(49.5, 1.0), arrival=(44.0, 6.0), stop_points=[(47.0, 3.0), LYON])

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.tier, TripMatcher.STOP_POINT)
        self.assertEqual([t.id for t in result.trips], [trip.id])

    def test_proximity_match(self):
        trip = make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80))

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.tier, TripMatcher.PROXIMITY)
        self.assertEqual(result.message, 'Nearby trips found')
        self.assertEqual([t.id for t in result.trips], [trip.id])

    def test_proximity_requires_both_endpoints(self):
        # Arrival about 50 km north of the destination
        make_trip(departure=(48.80, 2.35), arrival=(LYON[0] + km_to_latitude_degrees(50), LYON[1]))

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.outcome, SearchOutcome.EMPTY)
        self.assertEqual(result.message, 'No trip found')
        self.assertEqual(result.total, 0)
        self.assertEqual(result.trips, [])

    def test_strict_tier_wins_over_looser_tiers(self):
        direct = make_trip()
        make_trip(departure=(49.5, 1.0), arrival=(44.0, 6.0), stop_points=[PARIS])
        make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80))

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.tier, TripMatcher.STRICT)
        self.assertEqual([t.id for t in result.trips], [direct.id])

    def test_stop_point_tier_wins_over_proximity(self):
        via_stop = make_trip(departure=(49.5, 1.0), arrival=(44.0, 6.0), stop_points=[LYON])
        make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80))

        result = self.matcher.search(make_criteria())

        self.assertEqual([t.id for t in result.trips], [via_stop.id])

    def test_seat_filter_applies_to_every_tier(self):
        make_trip(available_seats=1)
        make_trip(departure=(49.5, 1.0), arrival=(44.0, 6.0), stop_points=[PARIS], available_seats=1)
        make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80), available_seats=1)

        result = self.matcher.search(make_criteria(min_seats=2))

        self.assertEqual(result.outcome, SearchOutcome.EMPTY)

    def test_returned_trips_have_enough_seats(self):
        for seats in range(5):
            make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80), available_seats=seats)

        result = self.matcher.search(make_criteria(min_seats=3))

        self.assertEqual(result.total, 2)
        self.assertTrue(all(t.available_seats >= 3 for t in result.trips))

    def test_exact_time_mismatch_falls_through_to_proximity(self):
        make_trip(departure_time='08:30')

        result = self.matcher.search(make_criteria(departure_time='08:31'))

        self.assertEqual(result.tier, TripMatcher.PROXIMITY)

    def test_date_filters(self):
        trip = make_trip(
            departure_time='08:30',
            estimated_arrival_date=TRIP_DATE,
            arrival_time='13:30',
        )

        result = self.matcher.search(make_criteria(
            departure_date=TRIP_DATE,
            departure_time='08:30',
            arrival_date=TRIP_DATE,
            arrival_time='13:30',
        ))

        self.assertEqual(result.tier, TripMatcher.STRICT)
        self.assertEqual([t.id for t in result.trips], [trip.id])

    def test_null_coordinate_excluded_from_proximity(self):
        make_trip(departure=(48.80, 2.35), arrival=(None, 4.80))

        result = self.matcher.search(make_criteria())

        self.assertEqual(result.outcome, SearchOutcome.EMPTY)

    def test_radius_boundary_is_inclusive(self):
        departure = (PARIS[0] + 0.1, PARIS[1])
        arrival = (LYON[0], LYON[1] + 0.1)
        make_trip(departure=departure, arrival=arrival)
        radius = max(
            DistanceService.haversine_distance(*PARIS, *departure),
            DistanceService.haversine_distance(*LYON, *arrival),
        )

        inside = TripMatcher(radius_km=radius).search(make_criteria())
        outside = TripMatcher(radius_km=radius - 1e-6).search(make_criteria())

        self.assertEqual(inside.total, 1)
        self.assertEqual(outside.total, 0)

    @override_settings(TRIP_SEARCH_RADIUS_KM=30)
    def test_default_radius_of_30_km(self):
        near = make_trip(
            departure=(PARIS[0] + km_to_latitude_degrees(29.9), PARIS[1]),
            arrival=(LYON[0] - km_to_latitude_degrees(29.9), LYON[1]),
        )
        make_trip(
            departure=(PARIS[0] + km_to_latitude_degrees(30.1), PARIS[1]),
            arrival=(LYON[0] - km_to_latitude_degrees(29.9), LYON[1]),
        )

        result = TripMatcher().search(make_criteria())

        self.assertEqual([t.id for t in result.trips], [near.id])

    def test_antipodal_trip_is_not_nearby(self):
        make_trip(departure=(-0.08, 180.0), arrival=(50.0, 50.0))

        result = self.matcher.search(make_criteria(origin=(0.08, 0.0), destination=(50.0, 50.0)))

        self.assertEqual(result.outcome, SearchOutcome.EMPTY)
        self.assertEqual(result.trips, [])

    def test_pagination(self):
        trips = [make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80)) for _ in range(12)]

        result = self.matcher.search(make_criteria(page=2, limit=5))

        self.assertEqual(result.total, 12)
        self.assertEqual(result.page, 2)
        self.assertEqual(result.limit, 5)
        self.assertEqual([t.id for t in result.trips], [t.id for t in trips[5:10]])

    def test_store_failure_is_returned_as_result(self):
        with patch.object(TripStore, '_base_queryset', side_effect=DatabaseError("database is down")):
            with self.assertLogs('trips', level='ERROR') as logs:
                result = self.matcher.search(make_criteria(page=3, limit=4))

        self.assertEqual([r.name for r in logs.records], ['trips.services.matching'])

        self.assertEqual(result.outcome, SearchOutcome.FAILED)
        self.assertIn("database is down", result.message)
        self.assertEqual(result.as_page(), {
            'status': False,
            'total': 0,
            'page': 3,
            'limit': 4,
            'data': [],
        })

    def test_search_is_read_only(self):
        trip = make_trip()
        before = Trip.objects.values().get(pk=trip.pk)

        self.matcher.search(make_criteria())

        self.assertEqual(Trip.objects.values().get(pk=trip.pk), before)


class TripRouteServiceTests(TestCase):
    """Tests for route replay."""

    def test_waypoints_in_travel_order(self):
        trip = make_trip()
        StopPoint.objects.create(trip=trip, label='Dijon', latitude=47.3220, longitude=5.0415, order=2)
        StopPoint.objects.create(trip=trip, label='Auxerre', latitude=47.7982, longitude=3.5673, order=1)

        route = TripRouteService.build(trip)

        self.assertEqual([w.kind for w in route.waypoints], ['departure', 'stop', 'stop', 'arrival'])
        self.assertEqual([w.label for w in route.waypoints], ['Paris', 'Auxerre', 'Dijon', 'Lyon'])

        points = [(w.latitude, w.longitude) for w in route.waypoints]
        self.assertEqual(route.route_geometry, polyline.encode(points))
        self.assertAlmostEqual(route.distance_km, DistanceService.route_distance(points), places=2)

    def test_endpoints_without_coordinates_are_skipped(self):
        trip = make_trip(arrival=(None, None))

        route = TripRouteService.build(trip)

        self.assertEqual([w.kind for w in route.waypoints], ['departure'])
        self.assertEqual(route.distance_km, 0)


class TripAPITests(APITestCase):
    """Tests for Trip API endpoints."""

    def setUp(self):
        self.driver = Driver.objects.create(name='Jean Dupont', phone_number='+33600000000')
        self.vehicle = Vehicle.objects.create(name='Corolla', brand='Toyota', license_plate='AB-123-CD')
        self.vehicle.drivers.add(self.driver)

    def trip_payload(self, **overrides):
        payload = {
            'vehicle': self.vehicle.id,
            'driver': self.driver.id,
            'departure': 'Paris',
            'departure_latitude': PARIS[0],
            'departure_longitude': PARIS[1],
            'arrival': 'Lyon',
            'arrival_latitude': LYON[0],
            'arrival_longitude': LYON[1],
            'departure_date': '2025-06-15',
            'departure_time': '08:30',
            'available_seats': 3,
            'price': '45.00',
            'stop_points': [
                {'label': 'Dijon', 'latitude': 47.3220, 'longitude': 5.0415, 'order': 1},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create_trip(self):
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Trip.objects.count(), 1)
        self.assertEqual(response.data['status'], Trip.Status.PENDING)
        self.assertEqual(len(response.data['stop_points']), 1)
        self.assertGreater(response.data['distance'], 0)

    def test_create_trip_keeps_given_distance(self):
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(distance=465.0), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['distance'], 465.0)

    def test_create_trip_unknown_vehicle(self):
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(vehicle=9999), format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Trip.objects.count(), 0)

    def test_create_trip_vehicle_without_driver(self):
        idle_vehicle = Vehicle.objects.create(name='Clio')
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(vehicle=idle_vehicle.id), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_create_trip_invalid_coordinates(self):
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(departure_latitude=100), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_trip_invalid_time(self):
        url = reverse('trip-list')

        response = self.client.post(url, self.trip_payload(departure_time='25:00'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_trips(self):
        make_trip()

        response = self.client.get(reverse('trip-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_retrieve_trip(self):
        trip = make_trip(stop_points=[(47.3220, 5.0415)])

        response = self.client.get(reverse('trip-detail', kwargs={'pk': trip.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], trip.id)
        self.assertEqual(len(response.data['stop_points']), 1)

    def test_update_trip_seats(self):
        trip = make_trip(stop_points=[(47.3220, 5.0415)])

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'available_seats': 2},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['available_seats'], 2)
        # Stop points are kept when none are supplied
        self.assertEqual(len(response.data['stop_points']), 1)

    def test_update_trip_replaces_stop_points(self):
        trip = make_trip(stop_points=[(47.3220, 5.0415)])
        stop_points = [
            {'label': 'Auxerre', 'latitude': 47.7982, 'longitude': 3.5673, 'order': 1},
            {'label': 'Mâcon', 'latitude': 46.3069, 'longitude': 4.8287, 'order': 2},
        ]

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'stop_points': stop_points},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [s['label'] for s in response.data['stop_points']],
            ['Auxerre', 'Mâcon']
        )
        self.assertEqual(StopPoint.objects.filter(trip=trip).count(), 2)

    def test_delete_trip(self):
        trip = make_trip(stop_points=[(47.3220, 5.0415)])

        response = self.client.delete(reverse('trip-detail', kwargs={'pk': trip.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Trip.objects.count(), 0)
        self.assertEqual(StopPoint.objects.count(), 0)

    def test_delete_nonexistent_trip(self):
        response = self.client.delete(reverse('trip-detail', kwargs={'pk': 9999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_change_status(self):
        trip = make_trip()

        response = self.client.patch(
            reverse('trip-change-status', kwargs={'pk': trip.id}),
            {'status': 'STARTED'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'STARTED')

    def test_change_status_of_completed_trip(self):
        trip = make_trip(status=Trip.Status.COMPLETED)

        response = self.client.patch(
            reverse('trip-change-status', kwargs={'pk': trip.id}),
            {'status': 'CANCELLED'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_change_status_invalid_value(self):
        trip = make_trip()

        response = self.client.patch(
            reverse('trip-change-status', kwargs={'pk': trip.id}),
            {'status': 'FLYING'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_trips_by_vehicle(self):
        other_vehicle = Vehicle.objects.create(name='Clio')
        make_trip(vehicle=self.vehicle)
        make_trip(vehicle=self.vehicle)
        make_trip(vehicle=other_vehicle)

        response = self.client.get(reverse('trip-by-vehicle', kwargs={'vehicle_id': self.vehicle.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_trips_by_driver(self):
        make_trip(driver=self.driver)
        make_trip()

        response = self.client.get(reverse('trip-by-driver', kwargs={'driver_id': self.driver.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_trips_by_vehicle_with_limit(self):
        for _ in range(12):
            make_trip(vehicle=self.vehicle)
        url = reverse('trip-by-vehicle', kwargs={'vehicle_id': self.vehicle.id})

        response = self.client.get(url, {'page': 1, 'limit': 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 12)
        self.assertEqual(len(response.data['results']), 5)

        response = self.client.get(url, {'page': 3, 'limit': 5})
        self.assertEqual(len(response.data['results']), 2)

    def test_list_trips_with_limit(self):
        for _ in range(3):
            make_trip()

        response = self.client.get(reverse('trip-list'), {'limit': 2})

        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)

    def test_update_trip_coordinates_recomputes_distance(self):
        trip = make_trip(distance=1.0)
        dijon = (47.3220, 5.0415)

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'arrival_latitude': dijon[0], 'arrival_longitude': dijon[1]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        expected = round(DistanceService.haversine_distance(*PARIS, *dijon), 3)
        self.assertAlmostEqual(response.data['distance'], expected, places=3)

        route = self.client.get(reverse('trip-route', kwargs={'pk': trip.id}))
        self.assertAlmostEqual(route.data['distance_km'], response.data['distance'], places=3)

    def test_update_trip_stop_points_recomputes_distance(self):
        trip = make_trip(distance=1.0)
        dijon = (47.3220, 5.0415)

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'stop_points': [{'label': 'Dijon', 'latitude': dijon[0], 'longitude': dijon[1], 'order': 1}]},
            format='json'
        )

        expected = round(DistanceService.route_distance([PARIS, dijon, LYON]), 3)
        self.assertAlmostEqual(response.data['distance'], expected, places=3)

    def test_update_trip_keeps_given_distance(self):
        trip = make_trip(distance=1.0)

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'arrival_latitude': 47.3220, 'arrival_longitude': 5.0415, 'distance': 250.0},
            format='json'
        )

        self.assertEqual(response.data['distance'], 250.0)

    def test_update_trip_seats_keeps_distance(self):
        trip = make_trip(distance=1.0)

        response = self.client.patch(
            reverse('trip-detail', kwargs={'pk': trip.id}),
            {'available_seats': 2},
            format='json'
        )

        self.assertEqual(response.data['distance'], 1.0)

    def test_trip_route(self):
        trip = make_trip(stop_points=[(47.3220, 5.0415)])

        response = self.client.get(reverse('trip-route', kwargs={'pk': trip.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['trip_id'], trip.id)
        self.assertEqual(len(response.data['waypoints']), 3)
        self.assertTrue(response.data['route_geometry'])


class TripSearchAPITests(APITestCase):
    """Tests for the trip search endpoint."""

    def setUp(self):
        self.url = reverse('trip-search')
        self.body = {
            'departure_latitude': PARIS[0],
            'departure_longitude': PARIS[1],
            'arrival_latitude': LYON[0],
            'arrival_longitude': LYON[1],
        }

    def test_search_direct_trip(self):
        trip = make_trip()

        response = self.client.post(self.url, self.body, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['statusCode'], 200)
        self.assertEqual(response.data['message'], 'Direct trips found')
        page = response.data['data']
        self.assertTrue(page['status'])
        self.assertEqual(page['total'], 1)
        self.assertEqual(page['page'], 1)
        self.assertEqual(page['limit'], 10)
        self.assertEqual(page['data'][0]['id'], trip.id)

    def test_search_includes_driver_and_vehicle(self):
        driver = Driver.objects.create(name='Jean Dupont')
        vehicle = Vehicle.objects.create(name='Corolla')
        make_trip(driver=driver, vehicle=vehicle)

        response = self.client.post(self.url, self.body, format='json')

        found = response.data['data']['data'][0]
        self.assertEqual(found['driver']['name'], 'Jean Dupont')
        self.assertEqual(found['vehicle']['name'], 'Corolla')

    def test_search_pagination(self):
        for _ in range(12):
            make_trip(departure=(48.80, 2.35), arrival=(45.80, 4.80))

        response = self.client.post(f"{self.url}?page=2&limit=5", self.body, format='json')

        page = response.data['data']
        self.assertEqual(response.data['message'], 'Nearby trips found')
        self.assertEqual(page['total'], 12)
        self.assertEqual(page['page'], 2)
        self.assertEqual(len(page['data']), 5)

    def test_search_no_trip(self):
        response = self.client.post(self.url, self.body, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['statusCode'], 200)
        self.assertEqual(response.data['message'], 'No trip found')
        self.assertEqual(response.data['data'], {
            'status': False,
            'total': 0,
            'page': 1,
            'limit': 10,
            'data': [],
        })

    def test_search_with_antipodal_trip(self):
        make_trip(departure=(-0.08, 180.0), arrival=(50.0, 50.0))
        body = {
            'departure_latitude': 0.08,
            'departure_longitude': 0.0,
            'arrival_latitude': 50.0,
            'arrival_longitude': 50.0,
        }

        response = self.client.post(self.url, body, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['statusCode'], 200)
        self.assertEqual(response.data['message'], 'No trip found')

    @patch.object(TripStore, '_base_queryset', side_effect=DatabaseError("database is down"))
    def test_search_failure_is_reported_in_body(self, mock_queryset):
        response = self.client.post(self.url, self.body, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['statusCode'], 500)
        self.assertIn('database is down', response.data['message'])
        self.assertFalse(response.data['data']['status'])
        self.assertEqual(response.data['data']['data'], [])

    def test_search_missing_coordinates(self):
        response = self.client.post(self.url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_non_numeric_coordinates(self):
        body = dict(self.body, departure_latitude='north')

        response = self.client.post(self.url, body, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_invalid_time(self):
        body = dict(self.body, departure_time='8h30')

        response = self.client.post(self.url, body, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_invalid_seats(self):
        body = dict(self.body, available_seats=0)

        response = self.client.post(self.url, body, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_invalid_page(self):
        response = self.client.post(f"{self.url}?page=0", self.body, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class VehicleAPITests(APITestCase):
    """Tests for vehicle and driver endpoints."""

    def test_create_vehicle_with_driver(self):
        driver = Driver.objects.create(name='Jean Dupont')

        response = self.client.post(
            reverse('vehicle-list'),
            {'name': 'Corolla', 'brand': 'Toyota', 'capacity': 4, 'drivers': [driver.id]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['drivers'], [driver.id])

    def test_create_vehicle_invalid_capacity(self):
        response = self.client.post(
            reverse('vehicle-list'),
            {'name': 'Corolla', 'capacity': 0},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_driver(self):
        response = self.client.post(reverse('driver-list'), {'name': 'Marie Curie'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Driver.objects.count(), 1)
