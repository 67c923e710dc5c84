"""
Geodesic distance using the Haversine formula.

Assumption
----------
Fiber is laid along the traced polyline, so the length of a build is the
sum of the great-circle legs between consecutive waypoints.  No road or
duct network is consulted; terrain and sag are ignored.

Complexity: O(1) per leg, O(n) per path.
"""

from __future__ import annotations

import math
from typing import Sequence

from .entities import GeoPoint

EARTH_RADIUS_M = 6_371_000.0


def compute_distance(p1: GeoPoint, p2: GeoPoint) -> float:
    """Return the great-circle distance in **meters** between two points."""
    lat1_r, lat2_r = math.radians(p1.latitude), math.radians(p2.latitude)
    dlat = math.radians(p2.latitude - p1.latitude)
    dlng = math.radians(p2.longitude - p1.longitude)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # Rounding can push a a hair outside [0, 1] for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def compute_path_distance(points: Sequence[GeoPoint]) -> float:
    """
    Sum the legs of an ordered polyline.

    Fewer than two points means there is nothing to measure yet (e.g. the
    client has not been placed), so the result is 0.0 rather than an error.
    """
    total = 0.0
    for i in range(1, len(points)):
        total += compute_distance(points[i - 1], points[i])
    return total
