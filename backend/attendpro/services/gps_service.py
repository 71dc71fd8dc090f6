
# backend/attendpro/services/gps_service.py
"""GPS verification service."""
from typing import Dict
import math

EARTH_RADIUS_METERS = 6371000


class GPSService:
    """Service for GPS and location verification."""

    @staticmethod
    def validate_coordinates(latitude: float, longitude: float) -> bool:
        """Check that a coordinate pair lies in the valid degree ranges."""
        if any(math.isnan(value) or math.isinf(value) for value in (latitude, longitude)):
            return False
        return -90 <= latitude <= 90 and -180 <= longitude <= 180

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate haversine distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        # Rounding can push a a hair above 1 for antipodal points
        a = min(1.0, a)

        return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))

    @staticmethod
    def verify_location(user_lat: float, user_lng: float, target) -> Dict:
        """Verify if user is within the geofence around target.

        The decision is taken on the distance rounded to centimetres, which is
        also the value reported back to the caller.
        """
        distance = round(GPSService.calculate_distance(
            user_lat, user_lng,
            target.latitude, target.longitude
        ), 2)

        return {
            'is_inside': distance <= target.radius_meters,
            'distance': distance,
            'radius': target.radius_meters,
            'center': {
                'latitude': target.latitude,
                'longitude': target.longitude
            }
        }
