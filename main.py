#!/usr/bin/env python3
"""
Street View Hyperlapse Generator

Computes a walking route between two fixed points, grabs a Street View image
facing the direction of travel at every point of the route, and stitches them
into a smoothed hyperlapse video with ffmpeg.

Usage:
    python main.py
    python main.py --only-coordinates
    python main.py --skip-fetch
"""

import argparse
import sys

from config import HyperlapseConfig, PipelineOptions
from pipeline import HyperlapsePipeline
from route_client import RouteClient
from streetview import StreetViewClient
from video_maker import VideoEncoder


def print_progress(current: int, total: int, prefix: str = ""):
    """Print a progress bar."""
    bar_length = 30
    filled = int(bar_length * current / total)
    bar = "=" * filled + "-" * (bar_length - filled)
    percent = current / total * 100
    print(f"\r{prefix}[{bar}] {percent:.1f}% ({current}/{total})", end="", flush=True)
    if current == total:
        print()


def build_parser(config: HyperlapseConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a Street View hyperlapse along a walking route",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --only-coordinates
  python main.py --skip-fetch
        """
    )
    parser.add_argument(
        "--skip-fetch", "-s",
        action="store_true",
        help=f"Skip fetching images and use existing ones in the {config.images_dir} directory"
    )
    parser.add_argument(
        "--only-coordinates", "-c",
        action="store_true",
        help=f"Only save coordinates to {config.coordinates_path}"
    )
    return parser


def main(argv=None, config: HyperlapseConfig = None) -> int:
    config = config or HyperlapseConfig.from_env()
    args = build_parser(config).parse_args(argv)
    options = PipelineOptions(skip_fetch=args.skip_fetch, only_coordinates=args.only_coordinates)

    print("Starting hyperlapse generation process...")

    if not options.skip_fetch and not config.api_key:
        print("ERROR: Please set your Google API key")
        print("  Set the GOOGLE_API_KEY environment variable")
        return 1

    def fetch_progress(current, total):
        print_progress(current, total, "  Fetching: ")

    pipeline = HyperlapsePipeline(
        config,
        options,
        route_client=RouteClient(config),
        imagery_client=StreetViewClient(config),
        video_encoder=VideoEncoder(config),
        progress_callback=fetch_progress,
    )
    result = pipeline.run()
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
