"""Street View fetcher - downloads one oriented image per route point."""

import io
from pathlib import Path

import requests
from PIL import Image, UnidentifiedImageError

from config import HyperlapseConfig, INDEX_WIDTH
from errors import ImageFetchError

STREETVIEW_URL = "https://maps.googleapis.com/maps/api/streetview"
METADATA_URL = "https://maps.googleapis.com/maps/api/streetview/metadata"


def format_index(index: int) -> str:
    """Zero-pad an index so filenames sort in route order."""
    return str(index).rjust(INDEX_WIDTH, "0")


def image_filename(prefix: str, index: int) -> str:
    return f"{prefix}{format_index(index)}.jpg"


def image_path(config: HyperlapseConfig, index: int) -> Path:
    return config.images_dir / image_filename(config.image_prefix, index)


class StreetViewClient:
    """Fetches Street View Static API crops oriented along the route."""

    def __init__(self, config: HyperlapseConfig, session: requests.Session = None):
        self.config = config
        self.session = session or requests.Session()

    def _get(self, url: str, params: dict) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            raise ImageFetchError(f"Request failed: {e}") from e

        if response.status_code != 200:
            raise ImageFetchError(f"HTTP {response.status_code}")
        return response

    def has_coverage(self, lat: float, lng: float) -> bool:
        """
        Check if Street View imagery exists at a location.

        The metadata endpoint is not billed, so this is cheap to call first.
        """
        params = {
            "location": f"{lat},{lng}",
            "key": self.config.api_key
        }
        try:
            data = self._get(METADATA_URL, params).json()
        except ValueError as e:
            raise ImageFetchError(f"Invalid metadata response: {e}") from e
        return data.get("status") == "OK"

    def fetch_image(self, lat: float, lng: float, heading: float) -> bytes:
        """
        Fetch a Street View image.

        Args:
            lat: Latitude
            lng: Longitude
            heading: Compass heading (0-360)

        Returns:
            Image bytes (JPEG)

        Raises:
            ImageFetchError: If the request fails, the location has no
                coverage, or the payload is not an image
        """
        if self.config.check_coverage and not self.has_coverage(lat, lng):
            raise ImageFetchError(f"No Street View coverage at {lat},{lng}")

        params = {
            "size": self.config.image_size,
            "location": f"{lat},{lng}",
            "fov": self.config.fov,
            "heading": heading,
            "pitch": self.config.pitch,
            "key": self.config.api_key
        }
        content = self._get(STREETVIEW_URL, params).content

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ImageFetchError(f"Response is not a valid image: {e}") from e

        return content
