"""Configuration for the Street View hyperlapse generator."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

# Google API Key - set via environment variable
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

# Route endpoints (lat, lng)
ORIGIN = (35.66897641953312, 139.62363135889075)
DESTINATION = (35.6585460777285, 139.69855525280985)

# Output locations
IMAGES_DIR = "images"
OUTPUT_DIR = "output"
COORDINATES_FILENAME = "coordinates.json"
VIDEO_PATH = "hyperlapse.mp4"
IMAGE_PREFIX = "streetview_"
INDEX_WIDTH = 4  # Zero-padding keeps lexicographic order == numeric order
MAX_ROUTE_POINTS = 10 ** INDEX_WIDTH  # Longer routes would overflow the padded index

# Street View image settings
STREETVIEW_SIZE = "600x400"
STREETVIEW_FOV = 90
STREETVIEW_PITCH = 0  # 0 = horizontal, 90 = up, -90 = down
CHECK_COVERAGE = False  # Query the (free) metadata endpoint before each image

# Rate limiting
REQUEST_DELAY_SECONDS = 0.2
REQUEST_TIMEOUT_SECONDS = 30

# Video settings
VIDEO_FPS = 30
VIDEO_CRF = 18


@dataclass(frozen=True)
class HyperlapseConfig:
    """Everything the pipeline and its collaborators need, resolved once at start."""
    api_key: str = GOOGLE_API_KEY
    origin: Tuple[float, float] = ORIGIN
    destination: Tuple[float, float] = DESTINATION
    images_dir: Path = Path(IMAGES_DIR)
    output_dir: Path = Path(OUTPUT_DIR)
    video_path: Path = Path(VIDEO_PATH)
    image_prefix: str = IMAGE_PREFIX
    image_size: str = STREETVIEW_SIZE
    fov: int = STREETVIEW_FOV
    pitch: int = STREETVIEW_PITCH
    check_coverage: bool = CHECK_COVERAGE
    request_delay: float = REQUEST_DELAY_SECONDS
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    fps: int = VIDEO_FPS
    crf: int = VIDEO_CRF

    @property
    def coordinates_path(self) -> Path:
        return self.output_dir / COORDINATES_FILENAME

    @classmethod
    def from_env(cls, base_dir: Path = None) -> "HyperlapseConfig":
        """
        Build a config from the environment.

        Args:
            base_dir: Directory the relative output paths are resolved against
                (defaults to the current working directory)
        """
        base = Path(base_dir) if base_dir else Path.cwd()
        return cls(
            api_key=os.environ.get("GOOGLE_API_KEY", ""),
            images_dir=base / IMAGES_DIR,
            output_dir=base / OUTPUT_DIR,
            video_path=base / VIDEO_PATH,
        )


@dataclass(frozen=True)
class PipelineOptions:
    """Run flags parsed from the command line."""
    skip_fetch: bool = False
    only_coordinates: bool = False
