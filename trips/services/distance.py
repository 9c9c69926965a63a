"""
Distance calculation utilities using the Haversine formula.
"""

import math
from typing import List, Tuple


class DistanceService:
    """
    Service for great-circle distance calculations.

    All distances are expressed in kilometers.
    """

    EARTH_RADIUS_KM = 6371  # Earth's radius in kilometers

    @staticmethod
    def haversine_distance(
        lat1: float, lon1: float,
        lat2: float, lon2: float
    ) -> float:
        """
        Calculate the distance between two points on Earth using Haversine formula.

        Args:
            lat1, lon1: First point coordinates, in degrees
            lat2, lon2: Second point coordinates, in degrees

        Returns:
            Distance in kilometers
        """
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2)
        # Rounding can push a just past 1 for antipodal points
        a = min(1.0, max(0.0, a))
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return DistanceService.EARTH_RADIUS_KM * c

    @classmethod
    def route_distance(cls, route_points: List[Tuple[float, float]]) -> float:
        """
        Calculate the length of a route through an ordered list of points.

        Args:
            route_points: List of (lat, lon) tuples

        Returns:
            Sum of the leg distances in kilometers, 0 for fewer than two points
        """
        total_distance = 0.0
        for (lat1, lon1), (lat2, lon2) in zip(route_points, route_points[1:]):
            total_distance += cls.haversine_distance(lat1, lon1, lat2, lon2)

        return total_distance
