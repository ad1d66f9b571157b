"""Routes API client - fetches the encoded walking polyline between two points."""

from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from config import HyperlapseConfig
from errors import RouteUnavailable

ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
FIELD_MASK = "routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline"


@dataclass
class RouteResult:
    """The encoded path plus summary figures for status output."""
    encoded_polyline: str
    distance_meters: Optional[int] = None
    duration_seconds: Optional[float] = None


def _lat_lng(point: Tuple[float, float]) -> dict:
    lat, lng = point
    return {"location": {"latLng": {"latitude": lat, "longitude": lng}}}


def _parse_duration(value: Optional[str]) -> Optional[float]:
    """Durations come back as strings like '1234s'."""
    if not value:
        return None
    try:
        return float(value.rstrip("s"))
    except ValueError:
        return None


class RouteClient:
    """Computes walking routes with the Google Routes API."""

    def __init__(self, config: HyperlapseConfig, session: requests.Session = None):
        self.config = config
        self.session = session or requests.Session()

    def build_request_body(self, origin: Tuple[float, float], destination: Tuple[float, float]) -> dict:
        return {
            "origin": _lat_lng(origin),
            "destination": _lat_lng(destination),
            "travelMode": "WALK",
            "routingPreference": "ROUTING_PREFERENCE_UNSPECIFIED",
            "computeAlternativeRoutes": False,
            "routeModifiers": {
                "avoidTolls": False,
                "avoidHighways": False,
                "avoidFerries": False,
            },
            "languageCode": "en-US",
            "units": "METRIC",
            "polylineQuality": "HIGH_QUALITY",
        }

    def compute_route(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float]
    ) -> RouteResult:
        """
        Request a walking route and extract its encoded polyline.

        Args:
            origin: (lat, lng) start of the walk
            destination: (lat, lng) end of the walk

        Returns:
            RouteResult for the first route returned

        Raises:
            RouteUnavailable: On transport errors, non-200 responses, or a
                response without a route polyline
        """
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.config.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }

        try:
            response = self.session.post(
                ROUTES_URL,
                json=self.build_request_body(origin, destination),
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise RouteUnavailable(f"Routes request failed: {e}") from e

        if response.status_code != 200:
            raise RouteUnavailable(f"Routes API returned HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise RouteUnavailable(f"Routes API returned invalid JSON: {e}") from e

        routes = data.get("routes") or []
        if not routes:
            raise RouteUnavailable("Routes API returned no routes")

        route = routes[0]
        encoded = (route.get("polyline") or {}).get("encodedPolyline")
        if not encoded:
            raise RouteUnavailable("No encoded polyline found in the response")

        return RouteResult(
            encoded_polyline=encoded,
            distance_meters=route.get("distanceMeters"),
            duration_seconds=_parse_duration(route.get("duration")),
        )
