from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

import numpy as np
import PIL.Image

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "160", "--max-iterations", "200"]


@dataclass
class Expected:
    path: Path
    is_dir: bool = False


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    script: str = "render.py"
    clean: list[Path] | None = None
    check: Callable[[], None] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, self.script, *self.args]


def _image(name: str, file_name: str, *args: str, check: Callable[[Path], None] | None = None) -> Example:
    output = EXAMPLES_ROOT / name / file_name
    return Example(
        name=name,
        args=[*BASE_ARGS, *args, "--output", str(output)],
        expected=[Expected(output)],
        clean=[EXAMPLES_ROOT / name],
        check=(lambda: check(output)) if check is not None else None,
    )


def _background_rows(image_path: Path) -> list[int]:
    with PIL.Image.open(image_path) as image:
        pixels = np.asarray(image.convert("RGB"))
    blue = np.all(pixels == (0, 0, 255), axis=-1)
    return [int(row) for row in np.flatnonzero(blue.all(axis=1))]


def _expect_background_rows(*rows: int) -> Callable[[Path], None]:
    def check(image_path: Path) -> None:
        found = _background_rows(image_path)
        if found != list(rows):
            raise RuntimeError(f"{image_path}: background rows {found}, expected {list(rows)}")

    return check


EXAMPLES: list[Example] = [
    _image("defaults", "mandel.bmp"),
    _image("seahorse-valley", "seahorse.png", "-x", "-0.5", "-y", "-0.5", "-s", "0.2"),
    _image("spiral", "spiral.png", "-x", "-.38", "-y", "-.665", "-s", ".05", "-m", "100"),
    _image("deep", "deep.png", "-x", "0.286932", "-y", "0.014287", "-s", ".0005", "-m", "1000"),
    _image("threads", "threads.png", "--threads", "4"),
    _image("threads-remainder", "remainder.png", "--threads", "3", "--height", "161",
           check=_expect_background_rows(159, 160)),
    _image("even-partition", "even.png", "--threads", "3", "--height", "161", "--partition", "even",
           check=_expect_background_rows()),
    _image("python-kernel", "python.png", "--kernel", "python", "--threads", "2"),
    _image("format", "custom.tiff"),
    _image("verbose", "diagnostic.png", "--verbose", "--threads", "2"),
    Example(
        name="movie",
        script="movie.py",
        args=[
            *BASE_ARGS,
            "-x", "-0.743643",
            "-y", "0.131825",
            "--frames", "6",
            "--final-zoom", "0.01",
            "--frame-pattern", str(EXAMPLES_ROOT / "movie" / "frames" / "mandel{index}.bmp"),
            "--gif", str(EXAMPLES_ROOT / "movie" / "zoom.gif"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "movie" / "frames", is_dir=True),
            Expected(EXAMPLES_ROOT / "movie" / "zoom.gif"),
        ],
        clean=[EXAMPLES_ROOT / "movie"],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if expected.is_dir:
            if not expected.path.is_dir():
                raise RuntimeError(f"Expected directory {expected.path} was not created")
            if not any(expected.path.iterdir()):
                raise RuntimeError(f"Directory {expected.path} is empty")
        else:
            if not expected.path.is_file():
                raise RuntimeError(f"Expected file {expected.path} was not created")
    if example.check is not None:
        example.check()


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
