import sys
from argparse import ArgumentParser

# Importing render first quiets TensorFlow before it is loaded.
from render import add_render_arguments, request_from_args

from mandel import ConfigurationError, console, plan_frames, render_movie


def build_parser():
    parser = ArgumentParser(
        prog='mandelmovie',
        description='Render a zoom into the Mandelbrot set as numbered frames and an animated GIF.',
    )
    add_render_arguments(parser)

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to generate (default: %(default)s)',
                        metavar='FRAMES', default=50)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='the factor by which to multiply the scale each frame. '
                                                 'Choose < 1 for zoom in, > 1 for zoom out',
                        metavar='ZOOM_FACTOR', default=0.9)

    parser.add_argument('--final-zoom', type=float, default=None,
                        help='Overall scale applied by the last frame (e.g., 1e-4 narrows the window by 10000x). '
                             'If set, overrides --zoom-factor.')

    parser.add_argument('--easing', choices=['linear', 'ease'], default='ease',
                        help='Temporal curve used with --final-zoom: "linear" or "ease" for smooth ease-in-out.')

    parser.add_argument('--frame-pattern', type=str, dest='frame_pattern', default='mandel{index}.bmp',
                        help='File name pattern for frames; "{index}" is replaced by the frame number. '
                             'Pass an empty string to skip frame files.')

    parser.add_argument('--gif', type=str, dest='gif', default='mandel.gif',
                        help='Animated GIF to assemble from the frames. Pass an empty string to skip it.')

    parser.add_argument('--frame-duration', type=float, dest='frame_duration', default=0.1,
                        help='Display time of each GIF frame.')

    return parser


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    console.set_verbose(opt.verbose)

    if opt.frames <= 0:
        parser.error('--frames must be positive.')
    if opt.frame_pattern and '{index}' not in opt.frame_pattern:
        parser.error('--frame-pattern must contain "{index}".')
    if not opt.frame_pattern and not opt.gif:
        parser.error('Nothing to write: both --frame-pattern and --gif are empty.')

    request = request_from_args(opt, parser)
    try:
        requests = plan_frames(
            request,
            opt.frames,
            opt.zoom_factor,
            final_zoom=opt.final_zoom,
            easing=opt.easing,
        )
    except ConfigurationError as exc:
        parser.error(str(exc))

    print("mandelmovie: x=%f y=%f scale=%f..%g max=%d frames=%d threads=%d" % (
        request.center_x, request.center_y, requests[0].scale, requests[-1].scale,
        request.max_iterations, opt.frames, request.thread_count))

    result = render_movie(
        requests,
        opt.frame_pattern or None,
        gif_path=opt.gif or None,
        frame_duration=opt.frame_duration,
        kernel=opt.kernel,
        policy=opt.partition,
    )
    return 0 if result.ok else 1


if __name__ == '__main__':
    sys.exit(main())
