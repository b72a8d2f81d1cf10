"""Public API for multi-threaded Mandelbrot rendering."""

from .bitmap import PixelBuffer
from .colors import BACKGROUND, Color, ColorMapper, GrayscaleMapper
from .coordinator import BandOutcome, RenderReport, render_bands, render_to_file
from .escape import escape_counts, iterations_at_point
from .movie import MovieResult, compute_zoom_factors, plan_frames, render_movie
from .partition import (
    EVEN,
    LEGACY,
    BandAssignment,
    ConfigurationError,
    PlaneRect,
    RenderRequest,
    plan_bands,
)
from .worker import PYTHON, TENSORFLOW, band_coordinates, compute_band

__all__ = [
    "BACKGROUND",
    "BandAssignment",
    "BandOutcome",
    "Color",
    "ColorMapper",
    "ConfigurationError",
    "EVEN",
    "GrayscaleMapper",
    "LEGACY",
    "MovieResult",
    "PYTHON",
    "PixelBuffer",
    "PlaneRect",
    "RenderReport",
    "RenderRequest",
    "TENSORFLOW",
    "band_coordinates",
    "compute_band",
    "compute_zoom_factors",
    "escape_counts",
    "iterations_at_point",
    "plan_bands",
    "plan_frames",
    "render_bands",
    "render_movie",
    "render_to_file",
]
