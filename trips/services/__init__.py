"""Services module for trip-related business logic."""

from .distance import DistanceService
from .matching import SearchCriteria, SearchOutcome, SearchResult, TripMatcher
from .pagination import paginate
from .route import TripRouteService
from .store import TripFilter, TripStore, TripStoreError

__all__ = [
    'DistanceService',
    'SearchCriteria',
    'SearchOutcome',
    'SearchResult',
    'TripMatcher',
    'paginate',
    'TripRouteService',
    'TripFilter',
    'TripStore',
    'TripStoreError',
]
