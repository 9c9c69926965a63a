"""
Trip route replay built from a trip's endpoints and stop points.
"""

import polyline
from dataclasses import dataclass
from typing import List, Optional

from .distance import DistanceService


@dataclass
class Waypoint:
    """A point on the trip's route, in travel order."""
    label: str
    latitude: float
    longitude: float
    kind: str  # 'departure', 'stop' or 'arrival'
    order: Optional[int] = None


@dataclass
class TripRoute:
    """The replayable route of a trip."""
    trip_id: int
    waypoints: List[Waypoint]
    route_geometry: str  # encoded polyline of the waypoints
    distance_km: float


class TripRouteService:
    """
    Builds the ordered route of a trip.

    Waypoints are the departure point, the stop points by their order, then
    the arrival point. Endpoints without coordinates are left out.
    """

    @staticmethod
    def waypoints_for(trip, stop_points=None) -> List[Waypoint]:
        if stop_points is None:
            stop_points = trip.stop_points.all()

        waypoints = []
        if trip.departure_latitude is not None and trip.departure_longitude is not None:
            waypoints.append(Waypoint(
                label=trip.departure,
                latitude=trip.departure_latitude,
                longitude=trip.departure_longitude,
                kind='departure',
            ))

        for stop in sorted(stop_points, key=lambda s: s.order):
            waypoints.append(Waypoint(
                label=stop.label,
                latitude=stop.latitude,
                longitude=stop.longitude,
                kind='stop',
                order=stop.order,
            ))

        if trip.arrival_latitude is not None and trip.arrival_longitude is not None:
            waypoints.append(Waypoint(
                label=trip.arrival,
                latitude=trip.arrival_latitude,
                longitude=trip.arrival_longitude,
                kind='arrival',
            ))

        return waypoints

    @classmethod
    def route_distance(cls, waypoints: List[Waypoint]) -> float:
        return DistanceService.route_distance([(w.latitude, w.longitude) for w in waypoints])

    @classmethod
    def build(cls, trip) -> TripRoute:
        waypoints = cls.waypoints_for(trip)
        points = [(w.latitude, w.longitude) for w in waypoints]

        return TripRoute(
            trip_id=trip.id,
            waypoints=waypoints,
            route_geometry=polyline.encode(points) if points else '',
            distance_km=round(DistanceService.route_distance(points), 3),
        )
