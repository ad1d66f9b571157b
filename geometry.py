"""Route geometry - compass bearings and per-point viewing directions."""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class RoutePoint:
    """A point along the route with position and viewing direction."""
    index: int
    lat: float
    lng: float
    heading: float  # Direction to face (0-360, 0=North)


def calculate_bearing(start: Tuple[float, float], end: Tuple[float, float]) -> float:
    """Calculate the initial compass bearing from start to end (0-360 degrees)."""
    lat1, lng1 = start
    lat2, lng2 = end
    delta_lng = math.radians(lng2 - lng1)
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)

    y = math.sin(delta_lng) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - \
        math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lng)

    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def compute_headings(coordinates: Sequence[Tuple[float, float]]) -> List[float]:
    """
    Pick a viewing direction for every point on a route.

    Each point faces the next one; the last point keeps the bearing of the
    segment leading into it. A single-point route faces north.

    Args:
        coordinates: (lat, lng) pairs in travel order

    Returns:
        One heading per coordinate
    """
    count = len(coordinates)
    headings = []
    for i, coord in enumerate(coordinates):
        if i < count - 1:
            headings.append(calculate_bearing(coord, coordinates[i + 1]))
        elif i > 0:
            headings.append(calculate_bearing(coordinates[i - 1], coord))
        else:
            headings.append(0.0)
    return headings


def build_route_points(coordinates: Sequence[Tuple[float, float]]) -> List[RoutePoint]:
    """Pair each coordinate with its index and heading."""
    return [
        RoutePoint(index=i, lat=lat, lng=lng, heading=heading)
        for i, ((lat, lng), heading) in enumerate(zip(coordinates, compute_headings(coordinates)))
    ]
