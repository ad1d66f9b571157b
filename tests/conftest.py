"""
Pytest configuration and fixtures for the hyperlapse generator tests.

Provides a config rooted in a temporary directory and fake collaborators
for the route, imagery and video stages.
"""

import io
import pytest
from pathlib import Path

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PIL import Image

from config import HyperlapseConfig
from errors import ImageFetchError, RouteUnavailable
from route_client import RouteResult
from video_maker import list_frames


def make_jpeg_bytes(size=(8, 8), color=(120, 130, 140)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, "JPEG")
    return buf.getvalue()


class FakeRouteClient:
    """Returns a fixed polyline, or raises if error is set."""

    def __init__(self, encoded_polyline="_p~iF~ps|U_ulLnnqC_mqNvxq`@", error=None):
        self.encoded_polyline = encoded_polyline
        self.error = error
        self.calls = []

    def compute_route(self, origin, destination):
        self.calls.append((origin, destination))
        if self.error:
            raise RouteUnavailable(self.error)
        return RouteResult(encoded_polyline=self.encoded_polyline, distance_meters=1200, duration_seconds=900.0)


class FakeImageryClient:
    """Returns JPEG bytes, failing for the indices (call order) in fail_on."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def fetch_image(self, lat, lng, heading):
        call_index = len(self.calls)
        self.calls.append((lat, lng, heading))
        if call_index in self.fail_on:
            raise ImageFetchError("HTTP 500")
        return make_jpeg_bytes()


class FakeVideoEncoder:
    """Records the frames present when encode is called."""

    def __init__(self, config, error=None):
        self.config = config
        self.error = error
        self.frames_seen = None

    def encode(self):
        self.frames_seen = list_frames(self.config)
        if self.error:
            raise self.error
        return self.config.video_path


@pytest.fixture
def config(tmp_path) -> HyperlapseConfig:
    """Config with all output paths inside tmp_path and no rate-limit delay."""
    return HyperlapseConfig(
        api_key="test-key",
        images_dir=tmp_path / "images",
        output_dir=tmp_path / "output",
        video_path=tmp_path / "hyperlapse.mp4",
        request_delay=0.2,
    )


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg_bytes()


@pytest.fixture
def fake_route_client():
    return FakeRouteClient()


@pytest.fixture
def fake_imagery_client():
    return FakeImageryClient()


@pytest.fixture
def fake_video_encoder(config):
    return FakeVideoEncoder(config)


@pytest.fixture
def write_frames(config):
    """Create dummy frame files for the given indices."""
    def _write(indices):
        config.images_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for i in indices:
            path = Path(config.images_dir) / f"{config.image_prefix}{i:04d}.jpg"
            path.write_bytes(make_jpeg_bytes())
            paths.append(path)
        return paths
    return _write
