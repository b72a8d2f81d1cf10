import importlib.util
import sys
from pathlib import Path

import numpy as np
import PIL.Image
import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "generate_cli_examples.py"


@pytest.fixture(scope="module")
def cli_examples():
    spec = importlib.util.spec_from_file_location("generate_cli_examples", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def _write(path, pixels):
    PIL.Image.fromarray(pixels).save(path)


def test_background_rows_finds_unrendered_rows(cli_examples, tmp_path):
    pixels = np.full((5, 3, 3), 40, dtype=np.uint8)
    pixels[3:] = (0, 0, 255)
    pixels[1, 0] = (0, 0, 255)
    path = tmp_path / "remainder.png"
    _write(path, pixels)

    assert cli_examples._background_rows(path) == [3, 4]
    cli_examples._expect_background_rows(3, 4)(path)
    with pytest.raises(RuntimeError, match="background rows"):
        cli_examples._expect_background_rows()(path)


def test_remainder_example_expects_the_uncovered_rows(cli_examples):
    (example,) = [example for example in cli_examples.EXAMPLES if example.name == "threads-remainder"]
    assert example.check is not None
