"""Zoom sequences: a series of renders at shrinking scale, saved as frames and a GIF."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Sequence, Union

import imageio
import numpy as np

from .bitmap import PixelBuffer
from .colors import BACKGROUND, Color, ColorMapper
from .console import error, log
from .coordinator import render_bands
from .partition import LEGACY, ConfigurationError, RenderRequest
from .worker import PYTHON


@dataclass
class MovieResult:
    """Files written by :func:`render_movie`."""

    frame_paths: list[Path] = field(default_factory=list)
    failed_frames: list[int] = field(default_factory=list)
    gif_path: Optional[Path] = None
    gif_failed: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed_frames and not self.gif_failed


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: float | None, easing: str) -> np.ndarray:
    """Compute the scale multiplier each frame applies to the previous one.

    The first frame keeps the starting scale. With ``final_zoom`` the product of
    all multipliers equals ``final_zoom`` and the per-frame steps follow
    ``easing`` ("linear" or "ease" for a smooth ease-in-out) in log space;
    otherwise every later frame multiplies the scale by ``zoom_factor``.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)

    if final_zoom is not None and final_zoom > 0:
        log_target = np.log(final_zoom)
        easing_mode = easing.lower()

        def ease_in_out(t: float) -> float:
            return 3 * t ** 2 - 2 * t ** 3

        ease = (lambda u: u) if easing_mode == "linear" else ease_in_out
        if frames == 1:
            alphas = np.array([1.0], dtype=np.float64)
        else:
            alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
        alphas = np.clip(alphas, 0.0, 1.0)
        increments = np.diff(np.concatenate(([0.0], alphas)))
        return np.exp(increments * log_target)

    factors = np.full(frames, np.float64(zoom_factor), dtype=np.float64)
    factors[0] = 1.0
    return factors


def plan_frames(
    request: RenderRequest,
    frames: int,
    zoom_factor: float = 0.8,
    *,
    final_zoom: float | None = None,
    easing: str = "ease",
) -> list[RenderRequest]:
    """Return one render request per frame, zooming in on the request's center."""

    request.validate()
    if zoom_factor <= 0:
        raise ConfigurationError(f"zoom_factor must be positive, got {zoom_factor!r}")
    factors = compute_zoom_factors(frames, zoom_factor, final_zoom=final_zoom, easing=easing)
    scales = np.float64(request.scale) * np.cumprod(factors)
    return [replace(request, scale=float(scale)) for scale in scales]


def _open_gif(path: Path, frame_duration: float):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return imageio.get_writer(str(path), mode='I', duration=frame_duration, loop=0)
    except (OSError, ValueError) as exc:
        error(f"mandel: couldn't write to {path}: {exc}")
        return None


def _close_gif(writer, path: Path) -> bool:
    # The GIF is encoded when the writer closes, so write errors can surface here.
    try:
        writer.close()
    except (OSError, ValueError) as exc:
        error(f"mandel: couldn't write to {path}: {exc}")
        return False
    return True


def render_movie(
    requests: Sequence[RenderRequest],
    frame_pattern: Union[str, Path, None] = "mandel{index}.bmp",
    *,
    gif_path: Union[str, Path, None] = None,
    frame_duration: float = 0.1,
    start_index: int = 1,
    background: Color = BACKGROUND,
    mapper: Optional[ColorMapper] = None,
    kernel: str = PYTHON,
    policy: str = LEGACY,
) -> MovieResult:
    """Render ``requests`` in order.

    Each frame is saved to ``frame_pattern.format(index=...)`` when a pattern is
    given and appended to the GIF at ``gif_path`` when one is given. A frame that
    cannot be saved is recorded in ``failed_frames`` and the sequence continues.
    If the GIF cannot be written, ``gif_failed`` is set, ``gif_path`` is ``None``
    and the frames are still rendered.
    """

    result = MovieResult()
    writer = None
    target = None
    if gif_path is not None:
        target = Path(gif_path).expanduser()
        writer = _open_gif(target, frame_duration)
        result.gif_failed = writer is None

    total = len(requests)
    try:
        for offset, request in enumerate(requests):
            index = start_index + offset
            log("frame {0} out of {1}".format(offset + 1, total))
            buffer = PixelBuffer.create(request.width, request.height)
            buffer.reset(background)
            render_bands(request, buffer, mapper=mapper, kernel=kernel, policy=policy)

            if frame_pattern is not None:
                frame_path = Path(str(frame_pattern).format(index=index)).expanduser()
                if buffer.save(frame_path):
                    result.frame_paths.append(frame_path)
                else:
                    result.failed_frames.append(index)
            if writer is not None:
                try:
                    writer.append_data(np.ascontiguousarray(buffer.pixels[..., :3]))
                except (OSError, ValueError) as exc:
                    error(f"mandel: couldn't write to {target}: {exc}")
                    result.gif_failed = True
                    _close_gif(writer, target)
                    writer = None
    finally:
        if writer is not None and not _close_gif(writer, target):
            result.gif_failed = True

    if target is not None and not result.gif_failed:
        result.gif_path = target
    return result
