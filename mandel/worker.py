"""Rendering of one horizontal band of the image."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .bitmap import PixelBuffer
from .colors import ColorMapper, GrayscaleMapper
from .escape import escape_counts, iterations_at_point
from .partition import BandAssignment, ConfigurationError

PYTHON = "python"
TENSORFLOW = "tensorflow"
KERNELS = (PYTHON, TENSORFLOW)


def compute_band(
    band: BandAssignment,
    buffer: PixelBuffer,
    max_iterations: int,
    mapper: Optional[ColorMapper] = None,
    kernel: str = PYTHON,
) -> None:
    """Render every pixel of ``band`` into ``buffer``.

    Only rows ``band.rows`` are written. Pixel ``(i, j)`` samples the plane at
    ``x = xmin + i * (xmax - xmin) / width`` and
    ``y = ymin + (j - row_origin) * (ymax - ymin) / row_count``.
    """

    if kernel not in KERNELS:
        raise ConfigurationError(f"Unknown kernel '{kernel}'. Valid choices: {', '.join(KERNELS)}.")
    if band.row_count <= 0:
        return

    mapper = mapper if mapper is not None else GrayscaleMapper()
    if kernel == TENSORFLOW:
        _compute_band_vectorized(band, buffer, max_iterations, mapper)
    else:
        _compute_band_scalar(band, buffer, max_iterations, mapper)


def _compute_band_scalar(band: BandAssignment, buffer: PixelBuffer, max_iterations: int, mapper: ColorMapper) -> None:
    width = buffer.width
    height = band.row_count
    plane = band.plane

    for j in band.rows:
        for i in range(width):
            x = plane.xmin + i * (plane.xmax - plane.xmin) / width
            y = plane.ymin + (j - band.row_origin) * (plane.ymax - plane.ymin) / height
            iterations = iterations_at_point(x, y, max_iterations)
            buffer.set(i, j, mapper.map(iterations, max_iterations))


def band_coordinates(band: BandAssignment, width: int) -> tuple[np.ndarray, np.ndarray]:
    """Return the ``(rows, width)`` grids of plane coordinates sampled by ``band``."""

    plane = band.plane
    cols = np.arange(width, dtype=np.float64)
    rows = np.arange(band.row_start, band.row_stop, dtype=np.float64) - band.row_origin
    x = plane.xmin + cols * (plane.xmax - plane.xmin) / width
    y = plane.ymin + rows * (plane.ymax - plane.ymin) / band.row_count
    return np.meshgrid(x, y)


def _compute_band_vectorized(band: BandAssignment, buffer: PixelBuffer, max_iterations: int, mapper: ColorMapper) -> None:
    xs, ys = band_coordinates(band, buffer.width)
    counts = escape_counts(xs, ys, max_iterations)
    buffer.write_rows(band.row_start, mapper.map_array(counts, max_iterations))
