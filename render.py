import os
import sys
import warnings

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser, RawDescriptionHelpFormatter

from mandel import (
    EVEN,
    LEGACY,
    PYTHON,
    TENSORFLOW,
    ConfigurationError,
    RenderRequest,
    render_to_file,
)
from mandel import console

EXAMPLES = """\
Some examples are:
mandel -x -0.5 -y -0.5 -s 0.2
mandel -x -.38 -y -.665 -s .05 -m 100
mandel -x 0.286932 -y 0.014287 -s .0005 -m 1000
"""


def add_render_arguments(parser):
    """Register the options shared by every command that renders frames."""

    parser.add_argument('-m', '--max-iterations', type=int,
                        dest='max_iterations', help='the maximum number of iterations per point (default: %(default)s)',
                        metavar='MAX', default=1000)

    parser.add_argument('-x', '--x-center', type=float,
                        dest='x_center', help='x coordinate of the image center point (default: %(default)s)',
                        metavar='COORD', default=0.0)

    parser.add_argument('-y', '--y-center', type=float,
                        dest='y_center', help='y coordinate of the image center point (default: %(default)s)',
                        metavar='COORD', default=0.0)

    parser.add_argument('-s', '--scale', type=float,
                        dest='scale', help='scale of the image in Mandelbrot coordinates (default: %(default)s)',
                        metavar='SCALE', default=4.0)

    parser.add_argument('-W', '--width', type=int,
                        dest='width', help='width of the image in pixels (default: %(default)s)',
                        metavar='PIXELS', default=500)

    parser.add_argument('-H', '--height', type=int,
                        dest='height', help='height of the image in pixels (default: %(default)s)',
                        metavar='PIXELS', default=500)

    parser.add_argument('-n', '--threads', type=int,
                        dest='threads', help='number of threads to use (default: %(default)s)',
                        metavar='THREADS', default=1)

    parser.add_argument('--kernel', choices=[PYTHON, TENSORFLOW], default=TENSORFLOW,
                        help='escape-time kernel: "python" evaluates pixel by pixel, "tensorflow" a whole band at once.')

    parser.add_argument('--partition', choices=[LEGACY, EVEN], default=LEGACY,
                        help='band layout: "legacy" reproduces historical output, "even" covers every row '
                             'and splits the vertical range evenly.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including thread creation and joins.')


def build_parser():
    parser = ArgumentParser(
        prog='mandel',
        description='Render the Mandelbrot set to an image file using one thread per horizontal band.',
        epilog=EXAMPLES,
        formatter_class=RawDescriptionHelpFormatter,
    )
    add_render_arguments(parser)
    parser.add_argument('-o', '--output', type=str,
                        dest='output', help='output file; the format follows the extension (default: %(default)s)',
                        metavar='FILE', default='mandel.bmp')
    return parser


def request_from_args(opt, parser: ArgumentParser) -> RenderRequest:
    request = RenderRequest(
        center_x=opt.x_center,
        center_y=opt.y_center,
        scale=opt.scale,
        width=opt.width,
        height=opt.height,
        max_iterations=opt.max_iterations,
        thread_count=opt.threads,
    )
    try:
        return request.validate()
    except ConfigurationError as exc:
        parser.error(str(exc))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    console.set_verbose(opt.verbose)

    request = request_from_args(opt, parser)
    console.log("TensorFlow version: %s" % tf.__version__)

    print("mandel: x=%f y=%f scale=%f max=%d outfile=%s threads=%d" % (
        request.center_x, request.center_y, request.scale, request.max_iterations, opt.output, request.thread_count))

    saved = render_to_file(request, opt.output, kernel=opt.kernel, policy=opt.partition)
    return 0 if saved else 1


if __name__ == '__main__':
    sys.exit(main())
