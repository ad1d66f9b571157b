"""Video maker - assembles Street View frames into a hyperlapse using ffmpeg."""

import shutil
import subprocess
from pathlib import Path
from typing import List

from config import HyperlapseConfig
from errors import EncoderNotFound, InsufficientFrames, VideoEncodingError

MIN_FRAMES = 2

# Motion-compensated interpolation fills in frames between distant panoramas
MINTERPOLATE_FILTER = "minterpolate=mi_mode=mci:mc_mode=aobmc:me_mode=bidir:me=epzs:vsbmc=1"


def frame_pattern(config: HyperlapseConfig) -> str:
    return f"{config.image_prefix}*.jpg"


def list_frames(config: HyperlapseConfig) -> List[Path]:
    """Return the frames in the images directory, sorted by zero-padded index."""
    if not config.images_dir.is_dir():
        return []
    return sorted(config.images_dir.glob(frame_pattern(config)))


def build_ffmpeg_command(config: HyperlapseConfig) -> List[str]:
    return [
        "ffmpeg",
        "-y",  # Overwrite output
        "-framerate", str(config.fps),
        "-pattern_type", "glob",
        "-i", str(config.images_dir / frame_pattern(config)),
        "-vf", MINTERPOLATE_FILTER,
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-crf", str(config.crf),
        str(config.video_path)
    ]


class VideoEncoder:
    """Encodes the numbered images in the images directory into one video."""

    def __init__(self, config: HyperlapseConfig):
        self.config = config

    def encode(self) -> Path:
        """
        Create the hyperlapse video.

        Returns:
            Path to the created video file

        Raises:
            EncoderNotFound: If ffmpeg is not on the PATH
            InsufficientFrames: If fewer than two frames are available
            VideoEncodingError: If ffmpeg exits with an error
        """
        if shutil.which("ffmpeg") is None:
            raise EncoderNotFound("FFmpeg is not installed. Please install FFmpeg to generate the video.")

        frames = list_frames(self.config)
        print(f"  Found {len(frames)} images to process")
        if len(frames) < MIN_FRAMES:
            raise InsufficientFrames(f"At least {MIN_FRAMES} images are required to create a video")

        print("  Creating video with motion compensated interpolation...")
        result = subprocess.run(
            build_ffmpeg_command(self.config),
            capture_output=True,
            text=True
        )

        if result.returncode != 0:
            raise VideoEncodingError(f"ffmpeg failed: {result.stderr}")

        return self.config.video_path
