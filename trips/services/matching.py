"""
Trip search service for finding suitable trips for riders.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.conf import settings

from ..models import Trip
from .distance import DistanceService
from .pagination import paginate
from .store import TripFilter, TripStore, TripStoreError

logger = logging.getLogger(__name__)


@dataclass
class SearchCriteria:
    """A rider's search request."""
    departure_latitude: float
    departure_longitude: float
    arrival_latitude: float
    arrival_longitude: float
    departure_date: Optional[object] = None
    departure_time: Optional[str] = None
    arrival_date: Optional[object] = None
    arrival_time: Optional[str] = None
    min_seats: int = 1
    page: int = 1
    limit: int = 10

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.departure_latitude, self.departure_longitude)

    @property
    def destination(self) -> Tuple[float, float]:
        return (self.arrival_latitude, self.arrival_longitude)


class SearchOutcome(enum.Enum):
    FOUND = 'found'
    EMPTY = 'empty'
    FAILED = 'failed'


@dataclass
class SearchResult:
    """
    Outcome of a trip search.

    ``tier`` names the matching tier that produced the trips, and is None
    when nothing was found or the search failed.
    """
    outcome: SearchOutcome
    message: str
    page: int
    limit: int
    total: int = 0
    trips: List[Trip] = field(default_factory=list)
    tier: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.outcome is SearchOutcome.FOUND

    def as_page(self) -> Dict[str, Any]:
        return {
            'status': self.found,
            'total': self.total,
            'page': self.page,
            'limit': self.limit,
            'data': self.trips,
        }


class TripMatcher:
    """
    Service for matching riders with trips.

    Tiers are tried in order and the first non-empty one wins:
    1. Strict: departure and arrival match the rider's points exactly, with
       the seat filter and every supplied date/time filter
    2. Stop points: same seat and date/time filters, and a stop point sits
       exactly on the rider's origin or destination
    3. Proximity: seat filter only, both trip endpoints within the search
       radius of the rider's origin and destination
    """

    STRICT = 'strict'
    STOP_POINT = 'stop_point'
    PROXIMITY = 'proximity'

    MESSAGES = {
        STRICT: 'Direct trips found',
        STOP_POINT: 'Trips found via stop points',
        PROXIMITY: 'Nearby trips found',
    }
    NO_TRIP_MESSAGE = 'No trip found'
    FAILURE_MESSAGE = 'Internal server error'

    def __init__(
        self,
        store: Optional[TripStore] = None,
        radius_km: Optional[float] = None
    ):
        self.store = store or TripStore()
        self.radius_km = radius_km if radius_km is not None else settings.TRIP_SEARCH_RADIUS_KM
        self.distance_service = DistanceService()

    @property
    def tiers(self) -> List[Tuple[str, Callable[[SearchCriteria], List[Trip]]]]:
        return [
            (self.STRICT, self._strict_matches),
            (self.STOP_POINT, self._stop_point_matches),
            (self.PROXIMITY, self._nearby_matches),
        ]

    def search(self, criteria: SearchCriteria) -> SearchResult:
        """
        Find trips for the rider, falling back through the matching tiers.

        Store failures never escape this method; they are returned as a
        FAILED result carrying the error message.
        """
        try:
            for tier, find in self.tiers:
                trips = find(criteria)
                if trips:
                    logger.debug(f"Trip search matched {len(trips)} trips at tier {tier}")
                    page = paginate(trips, criteria.page, criteria.limit)
                    return SearchResult(
                        outcome=SearchOutcome.FOUND,
                        message=self.MESSAGES[tier],
                        page=page['page'],
                        limit=page['limit'],
                        total=page['total'],
                        trips=page['data'],
                        tier=tier,
                    )
        except TripStoreError as e:
            logger.error(f"Trip search failed: {e}")
            return SearchResult(
                outcome=SearchOutcome.FAILED,
                message=str(e) or self.FAILURE_MESSAGE,
                page=criteria.page,
                limit=criteria.limit,
            )

        logger.info(
            f"No trip found from {criteria.origin} to {criteria.destination} "
            f"for {criteria.min_seats} seat(s)"
        )
        return SearchResult(
            outcome=SearchOutcome.EMPTY,
            message=self.NO_TRIP_MESSAGE,
            page=criteria.page,
            limit=criteria.limit,
        )

    def _schedule_filter(self, criteria: SearchCriteria, **extra) -> TripFilter:
        return TripFilter(
            min_seats=criteria.min_seats,
            departure_date=criteria.departure_date,
            departure_time=criteria.departure_time,
            arrival_date=criteria.arrival_date,
            arrival_time=criteria.arrival_time,
            **extra
        )

    def _strict_matches(self, criteria: SearchCriteria) -> List[Trip]:
        """
        Trips whose departure and arrival coordinates equal the rider's
        origin and destination exactly, on top of the seat and schedule
        filters.
        """
        return self.store.find_trips(self._schedule_filter(
            criteria,
            departure_coords=criteria.origin,
            arrival_coords=criteria.destination,
        ))

    def _stop_point_matches(self, criteria: SearchCriteria) -> List[Trip]:
        return self.store.find_trips(self._schedule_filter(
            criteria,
            stop_points_near=(criteria.origin, criteria.destination),
        ))

    def _nearby_matches(self, criteria: SearchCriteria) -> List[Trip]:
        # Seat filter only, date and time filters do not apply here
        candidates = self.store.find_trips(TripFilter(min_seats=criteria.min_seats))
        return [trip for trip in candidates if self._is_nearby(trip, criteria)]

    def _is_nearby(self, trip: Trip, criteria: SearchCriteria) -> bool:
        if not trip.has_coordinates:
            return False

        departure_distance = self.distance_service.haversine_distance(
            *criteria.origin, *trip.departure_coords
        )
        if departure_distance > self.radius_km:
            return False

        arrival_distance = self.distance_service.haversine_distance(
            *criteria.destination, *trip.arrival_coords
        )
        return arrival_distance <= self.radius_km
