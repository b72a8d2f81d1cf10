import threading

import numpy as np
import PIL.Image
import pytest

from conftest import background_mask
from mandel import (
    EVEN,
    PYTHON,
    TENSORFLOW,
    ConfigurationError,
    PixelBuffer,
    RenderRequest,
    compute_band,
    render_bands,
    render_to_file,
)


def test_single_thread_renders_every_pixel(make_buffer):
    request = RenderRequest(center_x=0.0, center_y=0.0, scale=4.0, width=4, height=4, max_iterations=10, thread_count=1)
    buffer = make_buffer(4, 4)

    report = render_bands(request, buffer)

    assert report.ok
    assert [outcome.band_index for outcome in report.outcomes] == [1]
    assert not background_mask(buffer).any()


@pytest.mark.parametrize("kernel", [PYTHON, TENSORFLOW])
def test_remainder_rows_stay_background(make_buffer, kernel):
    request = RenderRequest(width=5, height=10, max_iterations=10, thread_count=3)
    buffer = make_buffer(5, 10)

    report = render_bands(request, buffer, kernel=kernel)

    assert report.ok
    assert [(o.band.row_start, o.band.row_stop) for o in report.outcomes] == [(0, 3), (3, 6), (6, 9)]
    mask = background_mask(buffer)
    assert not mask[:9].any()
    assert mask[9].all()


def test_even_partition_leaves_no_background(make_buffer):
    request = RenderRequest(width=5, height=10, max_iterations=10, thread_count=3)
    buffer = make_buffer(5, 10)

    render_bands(request, buffer, policy=EVEN)

    assert not background_mask(buffer).any()


@pytest.mark.parametrize("kernel", [PYTHON, TENSORFLOW])
def test_rendering_is_deterministic(make_buffer, kernel):
    request = RenderRequest(center_x=-0.75, center_y=0.1, scale=1.25, width=24, height=20, max_iterations=40, thread_count=4)
    first = make_buffer(24, 20)
    second = make_buffer(24, 20)

    render_bands(request, first, kernel=kernel)
    render_bands(request, second, kernel=kernel)

    assert first == second


def test_failed_band_does_not_stop_the_others(make_buffer, capsys):
    def flaky_worker(band, buffer, max_iterations, mapper, kernel):
        if band.band_index == 2:
            raise ArithmeticError("band exploded")
        compute_band(band, buffer, max_iterations, mapper, kernel)

    request = RenderRequest(width=6, height=9, max_iterations=10, thread_count=3)
    buffer = make_buffer(6, 9)

    report = render_bands(request, buffer, worker=flaky_worker)

    assert not report.ok
    assert [outcome.ok for outcome in report.outcomes] == [True, False, True]
    (failure,) = report.failed
    assert failure.band_index == 2
    assert failure.stage == "join"
    assert isinstance(failure.error, ArithmeticError)

    mask = background_mask(buffer)
    assert not mask[0:3].any()
    assert mask[3:6].all()
    assert not mask[6:9].any()
    assert "mandel: couldn't join thread 2: band exploded" in capsys.readouterr().err


def test_thread_start_failure_leaves_band_unrendered(make_buffer, capsys, monkeypatch):
    original_start = threading.Thread.start

    def refusing_start(thread):
        if thread.name == "mandel-band-1":
            raise RuntimeError("can't start new thread")
        original_start(thread)

    monkeypatch.setattr(threading.Thread, "start", refusing_start)
    request = RenderRequest(width=4, height=8, max_iterations=10, thread_count=2)
    buffer = make_buffer(4, 8)

    report = render_bands(request, buffer)

    assert [(o.band_index, o.ok, o.stage) for o in report.outcomes] == [(1, False, "launch"), (2, True, "join")]
    mask = background_mask(buffer)
    assert mask[0:4].all()
    assert not mask[4:8].any()
    assert "mandel: couldn't create new thread 1: can't start new thread" in capsys.readouterr().err


@pytest.mark.parametrize("width, height", [(4, 8), (4, 2), (5, 4)])
def test_buffer_must_match_the_request(make_buffer, width, height):
    request = RenderRequest(width=4, height=4, max_iterations=5, thread_count=2)
    buffer = make_buffer(width, height)

    with pytest.raises(ConfigurationError, match="buffer is"):
        render_bands(request, buffer)
    assert background_mask(buffer).all()


def test_verbose_output_traces_threads(make_buffer, capsys, monkeypatch):
    monkeypatch.setattr("mandel.console.VERBOSE", True)
    request = RenderRequest(width=2, height=4, max_iterations=5, thread_count=2)

    render_bands(request, make_buffer(2, 4))

    out = capsys.readouterr().out
    assert out.index("Creating thread 1") < out.index("Creating thread 2")
    assert out.index("Joining thread 2") < out.index("Joining thread 1")


def test_invalid_request_is_rejected_before_rendering(make_buffer):
    with pytest.raises(ConfigurationError):
        render_bands(RenderRequest(width=2, height=2, max_iterations=0), make_buffer(2, 2))


def test_render_to_file(tmp_path):
    path = tmp_path / "out" / "mandel.bmp"
    request = RenderRequest(width=8, height=6, max_iterations=15, thread_count=2)

    assert render_to_file(request, path)

    expected = PixelBuffer.create(8, 6)
    render_bands(request, expected)
    with PIL.Image.open(path) as image:
        assert image.size == (8, 6)
        np.testing.assert_array_equal(np.asarray(image.convert("RGB")), expected.pixels[..., :3])


def test_render_to_file_reports_save_failure(tmp_path, capsys):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    request = RenderRequest(width=4, height=4, max_iterations=5)

    assert not render_to_file(request, blocker / "mandel.bmp")
    assert "mandel: couldn't write to" in capsys.readouterr().err
