"""Mapping of escape-time iteration counts to RGBA colors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple

import numpy as np


class Color(NamedTuple):
    """An 8-bit-per-channel RGBA color."""

    red: int
    green: int
    blue: int
    alpha: int = 0

    @property
    def packed(self) -> int:
        return (self.red << 24) | (self.green << 16) | (self.blue << 8) | self.alpha

    @classmethod
    def from_packed(cls, value: int) -> "Color":
        return cls((value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


# Unrendered pixels stay this color so that gaps in the output are easy to spot.
BACKGROUND = Color(0, 0, 255, 0)


class ColorMapper(ABC):
    """Strategy turning an iteration count into a color.

    Subclasses implement :meth:`map`. :meth:`map_array` is the vectorised form
    used when a whole band is evaluated at once; the default implementation
    falls back to :meth:`map` for every distinct count, so overriding it is only
    an optimisation.
    """

    @abstractmethod
    def map(self, iteration_count: int, max_iterations: int) -> Color:
        ...

    def map_array(self, counts: np.ndarray, max_iterations: int) -> np.ndarray:
        counts = np.asarray(counts)
        rgba = np.zeros(counts.shape + (4,), dtype=np.uint8)
        for value in np.unique(counts):
            rgba[counts == value] = self.map(int(value), max_iterations)
        return rgba


class GrayscaleMapper(ColorMapper):
    """Scale the iteration count linearly to a gray level with alpha 0."""

    def map(self, iteration_count: int, max_iterations: int) -> Color:
        gray = 255 * iteration_count // max_iterations
        return Color(gray, gray, gray, 0)

    def map_array(self, counts: np.ndarray, max_iterations: int) -> np.ndarray:
        gray = (np.asarray(counts, dtype=np.int64) * 255) // int(max_iterations)
        gray = gray.astype(np.uint8)
        alpha = np.zeros_like(gray)
        return np.stack((gray, gray, gray, alpha), axis=-1)
