"""
Geographic helpers for route candidates

Great-circle distance and synthetic curved waypoints between two points.
"""

import math
from typing import List

import numpy as np

from clearway.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(start: GeoPoint, end: GeoPoint) -> float:
    """
    Great-circle distance between two points

    Args:
        start: First point
        end: Second point

    Returns:
        Distance in kilometres (symmetric, 0 for identical points)
    """
    lat1 = math.radians(start.lat)
    lat2 = math.radians(end.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(end.lng - start.lng)

    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def interpolate(start: GeoPoint, end: GeoPoint, fraction: float) -> GeoPoint:
    """Point at a fraction of the straight start-end line (plain lat/lng lerp)"""
    return GeoPoint(
        lat=start.lat + (end.lat - start.lat) * fraction,
        lng=start.lng + (end.lng - start.lng) * fraction
    )


def curved_waypoints(
    start: GeoPoint,
    end: GeoPoint,
    curvature: float,
    steps: int = 10
) -> List[GeoPoint]:
    """
    Generate waypoints along a gently curved line

    A sinusoidal lateral offset (zero at both ends, largest mid-route)
    keeps the geometry from being a literal straight line.

    Args:
        start: Route origin
        end: Route destination
        curvature: Strategy curvature factor (0.01 degree per unit)
        steps: Number of segments (steps + 1 waypoints)

    Returns:
        List of GeoPoint from start to end
    """
    t = np.linspace(0.0, 1.0, steps + 1)
    curve = np.sin(t * np.pi) * curvature * 0.01

    lats = np.clip(start.lat + (end.lat - start.lat) * t + curve, -90.0, 90.0)
    lngs = np.clip(start.lng + (end.lng - start.lng) * t - curve, -180.0, 180.0)

    return [GeoPoint(lat=float(lat), lng=float(lng)) for lat, lng in zip(lats, lngs)]
