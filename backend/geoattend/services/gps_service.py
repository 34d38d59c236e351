"""GPS distance and geofence checks."""
import math
from typing import Dict, Optional

EARTH_RADIUS_METERS = 6371000


def _is_coordinate(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class GPSService:
    """Service for GPS and location verification."""

    @staticmethod
    def calculate_distance(
        lat1: Optional[float], lon1: Optional[float],
        lat2: Optional[float], lon2: Optional[float]
    ) -> float:
        """Great-circle distance between two points in meters (haversine).

        Any missing or non-finite coordinate yields ``math.inf`` so the point
        can never pass a geofence.
        """
        if not all(_is_coordinate(v) for v in (lat1, lon1, lat2, lon2)):
            return math.inf

        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_METERS * c

    @staticmethod
    def verify_location(
        user_lat: Optional[float], user_lon: Optional[float],
        anchor_lat: Optional[float], anchor_lon: Optional[float],
        radius_meters: float
    ) -> Dict:
        """Check whether a user stands within ``radius_meters`` of an anchor point."""
        distance = GPSService.calculate_distance(user_lat, user_lon, anchor_lat, anchor_lon)

        return {
            'is_inside': distance <= radius_meters,
            'distance': distance,
            'radius': radius_meters,
        }
