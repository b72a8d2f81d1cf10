"""In-memory RGBA pixel buffer and its encoding to image files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import PIL.Image

from .colors import Color
from .console import error, log


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


class PixelBuffer:
    """A ``width x height`` grid of RGBA pixels.

    Pixels live in a ``(height, width, 4)`` ``uint8`` array. Workers that own
    disjoint row ranges may write into it concurrently without locking.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"pixel array must have shape (height, width, 4), got {pixels.shape}")
        self.pixels = pixels

    @classmethod
    def create(cls, width: int, height: int) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise ValueError(f"buffer dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def reset(self, color: Color) -> None:
        self.pixels[...] = tuple(color)

    def get(self, x: int, y: int) -> Color:
        return Color(*(int(channel) for channel in self.pixels[y, x]))

    def set(self, x: int, y: int, color: Color) -> None:
        self.pixels[y, x] = tuple(color)

    def write_rows(self, row_start: int, block: np.ndarray) -> None:
        """Copy a ``(rows, width, 4)`` block into the buffer starting at ``row_start``."""

        self.pixels[row_start:row_start + block.shape[0]] = block

    def to_image(self) -> PIL.Image.Image:
        # The alpha channel is not encoded, as in a 24-bit bitmap.
        return PIL.Image.fromarray(np.ascontiguousarray(self.pixels[..., :3]))

    def save(self, path: Union[str, Path], image_format: Optional[str] = None) -> bool:
        """Write the buffer to ``path``; return ``False`` if it could not be written."""

        output_path = Path(path).expanduser()
        ext = (image_format or output_path.suffix).lower().lstrip(".") or "bmp"
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.to_image().save(str(output_path), format=_pil_format_name(ext))
        except (OSError, ValueError, KeyError) as exc:
            error(f"mandel: couldn't write to {output_path}: {exc}")
            return False
        log(f"Saved {self.width}x{self.height} image to {output_path}")
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)
