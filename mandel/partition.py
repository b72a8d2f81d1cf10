"""Render requests and their division into per-thread horizontal bands."""

from __future__ import annotations

import math
from dataclasses import dataclass

LEGACY = "legacy"
EVEN = "even"
POLICIES = (LEGACY, EVEN)


class ConfigurationError(ValueError):
    """Raised when a render is requested with parameters it cannot honour."""


@dataclass(frozen=True)
class PlaneRect:
    """Region ``[xmin, xmax] x [ymin, ymax]`` of the complex plane."""

    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin


@dataclass(frozen=True)
class RenderRequest:
    """Parameters that describe a single render of the Mandelbrot set."""

    center_x: float = 0.0
    center_y: float = 0.0
    scale: float = 4.0
    width: int = 500
    height: int = 500
    max_iterations: int = 1000
    thread_count: int = 1

    def validate(self) -> "RenderRequest":
        for name in ("center_x", "center_y", "scale"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number, got {getattr(self, name)!r}")
        if self.scale <= 0:
            raise ConfigurationError(f"scale must be positive, got {self.scale!r}")
        for name in ("width", "height", "max_iterations"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.thread_count < 1:
            raise ConfigurationError(f"thread_count must be at least 1, got {self.thread_count!r}")
        return self

    @property
    def plane(self) -> PlaneRect:
        return PlaneRect(
            xmin=self.center_x - self.scale,
            xmax=self.center_x + self.scale,
            ymin=self.center_y - self.scale,
            ymax=self.center_y + self.scale,
        )


@dataclass(frozen=True)
class BandAssignment:
    """The rows one worker renders and the plane region they sample.

    Row ``j`` of the band samples ``plane.ymin + (j - row_origin) * plane.height / row_count``.
    """

    band_index: int
    row_start: int
    row_count: int
    plane: PlaneRect
    row_origin: int = 0

    @property
    def row_stop(self) -> int:
        return self.row_start + self.row_count

    @property
    def rows(self) -> range:
        return range(self.row_start, self.row_stop)


def plan_bands(request: RenderRequest, policy: str = LEGACY) -> list[BandAssignment]:
    """Split ``request`` into ``request.thread_count`` bands.

    The ``legacy`` policy reproduces the historical output exactly: every band
    is ``height // thread_count`` rows tall, so any remainder rows at the bottom
    belong to no band, and every band samples the same vertical range derived
    from a center shifted down by ``scale / thread_count``. The ``even`` policy
    covers every row and splits ``[center_y - scale, center_y + scale]`` among
    the bands in proportion to their rows.
    """

    request.validate()
    if policy == LEGACY:
        return _plan_legacy(request)
    if policy == EVEN:
        return _plan_even(request)
    raise ConfigurationError(f"Unknown partition policy '{policy}'. Valid choices: {', '.join(POLICIES)}.")


def _plan_legacy(request: RenderRequest) -> list[BandAssignment]:
    threads = request.thread_count
    band_height = request.height // threads

    yscale = request.scale / threads
    ycenter = request.center_y - yscale
    plane = PlaneRect(
        xmin=request.center_x - request.scale,
        xmax=request.center_x + request.scale,
        ymin=ycenter - yscale,
        ymax=ycenter + yscale,
    )

    return [
        BandAssignment(
            band_index=k,
            row_start=band_height * (k - 1),
            row_count=band_height,
            plane=plane,
            row_origin=0,
        )
        for k in range(1, threads + 1)
    ]


def _plan_even(request: RenderRequest) -> list[BandAssignment]:
    threads = request.thread_count
    full = request.plane
    base, remainder = divmod(request.height, threads)
    y_step = full.height / request.height

    bands: list[BandAssignment] = []
    row_start = 0
    for k in range(1, threads + 1):
        row_count = base + (1 if k <= remainder else 0)
        row_stop = row_start + row_count
        plane = PlaneRect(
            xmin=full.xmin,
            xmax=full.xmax,
            ymin=full.ymin + row_start * y_step,
            ymax=full.ymax if row_stop == request.height else full.ymin + row_stop * y_step,
        )
        bands.append(
            BandAssignment(
                band_index=k,
                row_start=row_start,
                row_count=row_count,
                plane=plane,
                row_origin=row_start,
            )
        )
        row_start = row_stop
    return bands
