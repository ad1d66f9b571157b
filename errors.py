"""Exception hierarchy shared by the pipeline stages."""


class HyperlapseError(Exception):
    """Base class for all pipeline errors."""


class RouteUnavailable(HyperlapseError):
    """The routing service returned no usable route."""


class ImageFetchError(HyperlapseError):
    """A single Street View image could not be fetched."""


class EncoderNotFound(HyperlapseError):
    """The ffmpeg binary is not installed."""


class InsufficientFrames(HyperlapseError):
    """Fewer than two images are available for the video."""


class VideoEncodingError(HyperlapseError):
    """ffmpeg exited with a non-zero status."""
