"""Hyperlapse pipeline - route -> polyline -> headings -> Street View -> video.

The run is a small state machine. Each handler performs one stage and
returns the next state; ABORTED and DONE are terminal.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from config import MAX_ROUTE_POINTS, HyperlapseConfig, PipelineOptions
from errors import (
    EncoderNotFound,
    ImageFetchError,
    InsufficientFrames,
    RouteUnavailable,
    VideoEncodingError,
)
from geometry import RoutePoint, build_route_points
from polyline_codec import DecodeError, decode
from streetview import format_index, image_path
from video_maker import list_frames


class PipelineState(Enum):
    START = "start"
    ROUTE_FETCHED = "route_fetched"
    DECODED = "decoded"
    COORDINATES_PERSISTED = "coordinates_persisted"
    IMAGES_FETCHED = "images_fetched"
    VIDEO_GENERATED = "video_generated"
    DONE = "done"
    ABORTED = "aborted"


TERMINAL_STATES = {PipelineState.DONE, PipelineState.ABORTED}


@dataclass
class PipelineResult:
    """Outcome of a run."""
    state: PipelineState
    exit_code: int
    coordinates: List[Tuple[float, float]] = field(default_factory=list)
    images_written: List[Path] = field(default_factory=list)
    failed_indices: List[int] = field(default_factory=list)
    video_path: Optional[Path] = None
    error: Optional[str] = None


def save_coordinates(coordinates: List[Tuple[float, float]], path: Path) -> None:
    """Write coordinates as [{"id": "0000", "coordinates": [lat, lng]}, ...]."""
    formatted = [
        {"id": format_index(i), "coordinates": [lat, lng]}
        for i, (lat, lng) in enumerate(coordinates)
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(formatted, f, indent=2)


class HyperlapsePipeline:
    """
    Sequences the hyperlapse stages and decides what each failure means.

    Route and decode failures abort the run. A failed image is skipped and
    leaves a gap in the numbering. Video failures are reported and the run
    still finishes.
    """

    def __init__(
        self,
        config: HyperlapseConfig,
        options: PipelineOptions,
        route_client,
        imagery_client,
        video_encoder,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Callable[[int, int], None] = None
    ):
        self.config = config
        self.options = options
        self.route_client = route_client
        self.imagery_client = imagery_client
        self.video_encoder = video_encoder
        self.sleep = sleep
        self.progress_callback = progress_callback

        self._encoded_polyline: Optional[str] = None
        self._result = PipelineResult(state=PipelineState.START, exit_code=0)
        self._video_failed = False

        self._handlers = {
            PipelineState.START: self._start,
            PipelineState.ROUTE_FETCHED: self._decode,
            PipelineState.DECODED: self._persist_or_fetch,
            PipelineState.COORDINATES_PERSISTED: self._finish,
            PipelineState.IMAGES_FETCHED: self._generate_video,
            PipelineState.VIDEO_GENERATED: self._finish,
        }

    def run(self) -> PipelineResult:
        self.config.images_dir.mkdir(parents=True, exist_ok=True)
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        state = PipelineState.START
        while state not in TERMINAL_STATES:
            state = self._handlers[state]()

        self._result.state = state
        self._result.exit_code = self._exit_code(state)
        return self._result

    def _exit_code(self, state: PipelineState) -> int:
        if state == PipelineState.ABORTED:
            return 1
        # With --skip-fetch the video is the only thing asked for
        if self.options.skip_fetch and self._video_failed:
            return 1
        return 0

    def _abort(self, message: str) -> PipelineState:
        print(f"  ERROR: {message}")
        self._result.error = message
        return PipelineState.ABORTED

    def _start(self) -> PipelineState:
        if self.options.skip_fetch:
            if not list_frames(self.config):
                return self._abort(
                    f"No images found in {self.config.images_dir}. "
                    "Please run without --skip-fetch first."
                )
            print(f"Using existing images in {self.config.images_dir}")
            return PipelineState.IMAGES_FETCHED

        print("Step 1/4: Computing walking route...")
        try:
            route = self.route_client.compute_route(self.config.origin, self.config.destination)
        except RouteUnavailable as e:
            return self._abort(f"Failed to get encoded polyline: {e}")

        if route.distance_meters is not None:
            print(f"  Distance: {route.distance_meters} meters")
        if route.duration_seconds is not None:
            print(f"  Duration: {route.duration_seconds:.0f} seconds")

        self._encoded_polyline = route.encoded_polyline
        return PipelineState.ROUTE_FETCHED

    def _decode(self) -> PipelineState:
        print("\nStep 2/4: Decoding polyline...")
        try:
            coordinates = decode(self._encoded_polyline)
        except DecodeError as e:
            return self._abort(f"Failed to decode polyline: {e}")
        finally:
            self._encoded_polyline = None

        if not coordinates:
            return self._abort("Failed to decode polyline: no coordinates")
        if len(coordinates) > MAX_ROUTE_POINTS:
            return self._abort(
                f"Route has {len(coordinates)} points; at most {MAX_ROUTE_POINTS} fit the image numbering"
            )

        print(f"  Decoded {len(coordinates)} coordinates")
        self._result.coordinates = coordinates
        return PipelineState.DECODED

    def _persist_or_fetch(self) -> PipelineState:
        path = self.config.coordinates_path
        save_coordinates(self._result.coordinates, path)
        print(f"  Coordinates saved to {path}")

        if self.options.only_coordinates:
            return PipelineState.COORDINATES_PERSISTED

        self._clear_frames()
        self._fetch_images(build_route_points(self._result.coordinates))
        return PipelineState.IMAGES_FETCHED

    def _clear_frames(self) -> None:
        """Remove frames from earlier runs so failed indices stay missing."""
        stale = list_frames(self.config)
        for path in stale:
            path.unlink()
        if stale:
            print(f"  Removed {len(stale)} images from a previous run")

    def _fetch_images(self, points: List[RoutePoint]) -> None:
        print("\nStep 3/4: Fetching Street View images...")
        total = len(points)

        for n, point in enumerate(points):
            if n > 0:
                self.sleep(self.config.request_delay)
            if self.progress_callback:
                self.progress_callback(n + 1, total)

            try:
                data = self.imagery_client.fetch_image(point.lat, point.lng, point.heading)
            except ImageFetchError as e:
                print(f"  Skipping image {point.index + 1}/{total} (heading {point.heading:.2f}): {e}")
                self._result.failed_indices.append(point.index)
                continue

            path = image_path(self.config, point.index)
            with open(path, "wb") as f:
                f.write(data)
            self._result.images_written.append(path)

        print(f"  Fetched {len(self._result.images_written)}/{total} images")

    def _generate_video(self) -> PipelineState:
        print("\nStep 4/4: Generating video...")
        try:
            self._result.video_path = self.video_encoder.encode()
        except (EncoderNotFound, InsufficientFrames, VideoEncodingError) as e:
            print(f"  ERROR: {e}")
            self._result.error = str(e)
            self._video_failed = True
        else:
            print(f"  Video generated successfully: {self._result.video_path}")
        return PipelineState.VIDEO_GENERATED

    def _finish(self) -> PipelineState:
        print("\nProcess completed!")
        return PipelineState.DONE
