"""Orchestration of a multi-threaded render."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from .bitmap import PixelBuffer
from .colors import BACKGROUND, Color, ColorMapper
from .console import error, log
from .partition import LEGACY, BandAssignment, ConfigurationError, RenderRequest, plan_bands
from .worker import PYTHON, compute_band

Worker = Callable[[BandAssignment, PixelBuffer, int, Optional[ColorMapper], str], None]


@dataclass(frozen=True)
class BandOutcome:
    """What happened to a single band; ``error`` is ``None`` on success."""

    band: BandAssignment
    error: Optional[BaseException] = None
    stage: str = "join"

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def band_index(self) -> int:
        return self.band.band_index


@dataclass
class RenderReport:
    """Per-band outcomes of a finished render, in band order."""

    outcomes: list[BandOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[BandOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class BandThread(threading.Thread):
    """Thread rendering one band; an exception from the worker is kept in ``error``."""

    def __init__(self, band: BandAssignment, worker: Worker, args: tuple):
        super().__init__(name=f"mandel-band-{band.band_index}", daemon=True)
        self.band = band
        self.worker = worker
        self.worker_args = args
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.worker(self.band, *self.worker_args)
        except Exception as exc:
            self.error = exc


def render_bands(
    request: RenderRequest,
    buffer: PixelBuffer,
    *,
    mapper: Optional[ColorMapper] = None,
    kernel: str = PYTHON,
    policy: str = LEGACY,
    worker: Worker = compute_band,
) -> RenderReport:
    """Render ``request`` into ``buffer`` using one thread per band.

    A band whose thread cannot be started or whose worker raises is reported
    and left at whatever the buffer held before; the other bands are
    unaffected. The returned report lists every band's outcome.
    """

    bands = plan_bands(request, policy)
    if (buffer.width, buffer.height) != (request.width, request.height):
        raise ConfigurationError(
            f"buffer is {buffer.width}x{buffer.height} but the request is {request.width}x{request.height}"
        )

    outcomes: dict[int, BandOutcome] = {}
    launched: list[BandThread] = []
    for band in bands:
        log(f"Creating thread {band.band_index}")
        thread = BandThread(band, worker, (buffer, request.max_iterations, mapper, kernel))
        try:
            thread.start()
        except RuntimeError as exc:
            error(f"mandel: couldn't create new thread {band.band_index}: {exc}")
            outcomes[band.band_index] = BandOutcome(band, exc, stage="launch")
            continue
        launched.append(thread)

    for thread in reversed(launched):
        band = thread.band
        log(f"Joining thread {band.band_index}")
        try:
            thread.join()
        except RuntimeError as exc:
            thread.error = exc
        if thread.error is not None:
            error(f"mandel: couldn't join thread {band.band_index}: {thread.error}")
            outcomes[band.band_index] = BandOutcome(band, thread.error, stage="join")
        else:
            outcomes[band.band_index] = BandOutcome(band)

    return RenderReport([outcomes[band.band_index] for band in bands])


def render_to_file(
    request: RenderRequest,
    path: Union[str, Path],
    *,
    background: Color = BACKGROUND,
    mapper: Optional[ColorMapper] = None,
    kernel: str = PYTHON,
    policy: str = LEGACY,
    image_format: Optional[str] = None,
) -> bool:
    """Render ``request`` and save it to ``path``.

    Returns ``False`` only if the image could not be written; failed bands are
    reported but still produce an image.
    """

    request.validate()
    buffer = PixelBuffer.create(request.width, request.height)
    buffer.reset(background)
    report = render_bands(request, buffer, mapper=mapper, kernel=kernel, policy=policy)
    if not report.ok:
        log(f"{len(report.failed)} of {len(report.outcomes)} bands were not rendered")
    return buffer.save(path, image_format)
