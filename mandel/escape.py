"""Escape-time evaluation of points in the complex plane."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

# Points whose squared magnitude exceeds this have escaped.
HORIZON_SQUARED = 4.0


def iterations_at_point(x: float, y: float, max_iterations: int) -> int:
    """Return the number of iterations at point ``(x, y)``, up to ``max_iterations``."""

    x0 = x
    y0 = y
    iteration = 0

    while x * x + y * y <= HORIZON_SQUARED and iteration < max_iterations:
        xt = x * x - y * y + x0
        yt = 2 * x * y + y0
        x = xt
        y = yt
        iteration += 1

    return iteration


@tf.function
def _escape_step(
    xs: tf.Tensor, ys: tf.Tensor, x0: tf.Tensor, y0: tf.Tensor, ns: tf.Tensor, active: tf.Tensor
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every still-bounded point by one iteration."""

    xt = xs * xs - ys * ys + x0
    yt = 2.0 * xs * ys + y0
    xs = tf.where(active, xt, xs)
    ys = tf.where(active, yt, ys)
    ns = ns + tf.cast(active, tf.int32)
    horizon = tf.constant(HORIZON_SQUARED, dtype=xs.dtype)
    active = tf.logical_and(active, xs * xs + ys * ys <= horizon)
    return xs, ys, ns, active


@tf.function(reduce_retracing=True)
def _escape_run(x0: tf.Tensor, y0: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros(tf.shape(x0), dtype=tf.int32)
    horizon = tf.constant(HORIZON_SQUARED, dtype=x0.dtype)
    active = x0 * x0 + y0 * y0 <= horizon

    def cond(i, xs, ys, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, xs, ys, ns, active):
        xs, ys, ns, active = _escape_step(xs, ys, x0, y0, ns, active)
        return i + 1, xs, ys, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, x0, y0, ns, active))
    return ns


def escape_counts(xs: np.ndarray, ys: np.ndarray, max_iterations: int, *, device: Optional[str] = None) -> np.ndarray:
    """Evaluate :func:`iterations_at_point` element-wise over two coordinate arrays.

    ``xs`` and ``ys`` must have the same shape. The recurrence runs in float64
    with the same operation order as the scalar version, so every element
    matches it exactly.
    """

    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if xs.shape != ys.shape:
        raise ValueError(f"coordinate arrays differ in shape: {xs.shape} != {ys.shape}")
    if xs.size == 0:
        return np.zeros(xs.shape, dtype=np.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        x0 = tf.convert_to_tensor(xs, dtype=tf.float64)
        y0 = tf.convert_to_tensor(ys, dtype=tf.float64)
        ns = _escape_run(x0, y0, tf.constant(max_iterations, dtype=tf.int32))

    return ns.numpy()
