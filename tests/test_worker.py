import numpy as np
import pytest

from conftest import background_mask
from mandel import (
    EVEN,
    LEGACY,
    PYTHON,
    TENSORFLOW,
    BandAssignment,
    Color,
    ConfigurationError,
    PlaneRect,
    RenderRequest,
    band_coordinates,
    compute_band,
    plan_bands,
)


@pytest.mark.parametrize("kernel", [PYTHON, TENSORFLOW])
def test_empty_band_writes_nothing(make_buffer, kernel):
    buffer = make_buffer(6, 4)
    band = BandAssignment(band_index=1, row_start=2, row_count=0, plane=PlaneRect(-2.0, 2.0, -2.0, 2.0))

    assert compute_band(band, buffer, 20, kernel=kernel) is None
    assert background_mask(buffer).all()


@pytest.mark.parametrize("kernel", [PYTHON, TENSORFLOW])
def test_band_writes_only_its_rows(make_buffer, kernel):
    request = RenderRequest(width=5, height=10, max_iterations=20, thread_count=3)
    band = plan_bands(request)[1]
    buffer = make_buffer(5, 10)

    compute_band(band, buffer, request.max_iterations, kernel=kernel)

    mask = background_mask(buffer)
    assert not mask[3:6].any()
    assert mask[:3].all()
    assert mask[6:].all()
    rendered = buffer.pixels[3:6]
    assert (rendered[..., 0] == rendered[..., 1]).all()
    assert (rendered[..., 1] == rendered[..., 2]).all()
    assert (rendered[..., 3] == 0).all()


@pytest.mark.parametrize("kernel", [PYTHON, TENSORFLOW])
def test_pixel_samples_the_interpolated_point(make_buffer, kernel):
    # One band: x in [-2.5, 1.5], y in [-4, 0] over four rows.
    request = RenderRequest(center_x=-0.5, center_y=0.0, scale=2.0, width=4, height=4, max_iterations=10)
    (band,) = plan_bands(request)
    buffer = make_buffer(4, 4)

    compute_band(band, buffer, request.max_iterations, kernel=kernel)

    # Pixel (2, 3) samples -0.5 - 1.0i, which escapes after three iterations.
    assert buffer.get(2, 3) == Color(76, 76, 76, 0)


def test_band_coordinates_use_band_height_and_row_origin():
    plane = PlaneRect(xmin=-2.5, xmax=1.5, ymin=-4.0, ymax=0.0)
    legacy = BandAssignment(band_index=2, row_start=4, row_count=4, plane=plane, row_origin=0)
    even = BandAssignment(band_index=2, row_start=4, row_count=4, plane=plane, row_origin=4)

    xs, ys = band_coordinates(legacy, 4)
    assert xs.shape == ys.shape == (4, 4)
    assert list(xs[0]) == [-2.5, -1.5, -0.5, 0.5]
    assert list(ys[:, 0]) == [0.0, 1.0, 2.0, 3.0]

    _, ys = band_coordinates(even, 4)
    assert list(ys[:, 0]) == [-4.0, -3.0, -2.0, -1.0]


@pytest.mark.parametrize("policy", [LEGACY, EVEN])
def test_kernels_produce_identical_bands(make_buffer, policy):
    request = RenderRequest(center_x=-0.6, center_y=0.1, scale=1.5, width=16, height=13, max_iterations=30, thread_count=3)
    scalar = make_buffer(16, 13)
    vectorized = make_buffer(16, 13)

    for band in plan_bands(request, policy):
        compute_band(band, scalar, request.max_iterations, kernel=PYTHON)
        compute_band(band, vectorized, request.max_iterations, kernel=TENSORFLOW)

    np.testing.assert_array_equal(scalar.pixels, vectorized.pixels)


def test_unknown_kernel(make_buffer):
    (band,) = plan_bands(RenderRequest(width=2, height=2))
    with pytest.raises(ConfigurationError, match="Unknown kernel"):
        compute_band(band, make_buffer(2, 2), 10, kernel="opencl")
