"""
Read-only trip queries used by the search pipeline.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from django.db import DatabaseError
from django.db.models import Q

from ..models import Trip

logger = logging.getLogger(__name__)


class TripStoreError(Exception):
    """Exception raised when the trip store cannot be queried."""
    pass


@dataclass
class TripFilter:
    """
    Query filter for trips.

    Unset optional fields act as wildcards. ``stop_points_near`` holds the
    (origin, destination) pair a trip must have at least one stop point at.
    """
    min_seats: int = 1
    departure_coords: Optional[Tuple[float, float]] = None
    arrival_coords: Optional[Tuple[float, float]] = None
    departure_date: Optional[object] = None
    departure_time: Optional[str] = None
    arrival_date: Optional[object] = None
    arrival_time: Optional[str] = None
    stop_points_near: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None


class TripStore:
    """
    Django ORM access to trips with their driver, vehicle and stop points.

    Results are ordered by departure date, departure time and id.
    """

    ORDERING = ('departure_date', 'departure_time', 'id')

    def find_trips(self, trip_filter: TripFilter) -> List[Trip]:
        """
        Return all trips matching ``trip_filter``.

        Raises:
            TripStoreError: If the database query fails
        """
        try:
            queryset = self._base_queryset().filter(self._build_conditions(trip_filter))

            if trip_filter.stop_points_near is not None:
                (origin_lat, origin_lon), (dest_lat, dest_lon) = trip_filter.stop_points_near
                queryset = queryset.filter(
                    Q(stop_points__latitude=origin_lat, stop_points__longitude=origin_lon) |
                    Q(stop_points__latitude=dest_lat, stop_points__longitude=dest_lon)
                ).distinct()

            return list(queryset.order_by(*self.ORDERING))
        except DatabaseError as e:
            logger.debug(f"Trip query failed: {e}")
            raise TripStoreError(str(e)) from e

    def _base_queryset(self):
        return Trip.objects.select_related('driver', 'vehicle').prefetch_related('stop_points', 'vehicle__drivers')

    @staticmethod
    def _build_conditions(trip_filter: TripFilter) -> Q:
        conditions = Q(available_seats__gte=trip_filter.min_seats)

        if trip_filter.departure_coords is not None:
            lat, lon = trip_filter.departure_coords
            conditions &= Q(departure_latitude=lat, departure_longitude=lon)
        if trip_filter.arrival_coords is not None:
            lat, lon = trip_filter.arrival_coords
            conditions &= Q(arrival_latitude=lat, arrival_longitude=lon)

        if trip_filter.departure_date:
            conditions &= Q(departure_date=trip_filter.departure_date)
        if trip_filter.departure_time:
            conditions &= Q(departure_time=trip_filter.departure_time)
        if trip_filter.arrival_date:
            conditions &= Q(estimated_arrival_date=trip_filter.arrival_date)
        if trip_filter.arrival_time:
            conditions &= Q(arrival_time=trip_filter.arrival_time)

        return conditions
