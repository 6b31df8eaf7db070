"""
Allow running the package directly: python -m rational_julia
"""
import logging
from argparse import ArgumentParser

from .app import run
from .settings import load_settings


def build_parser():
    parser = ArgumentParser(prog="rational_julia",
                            description="Explore z = (k / (z - v))^2 + x and hunt for the division by zero.")
    parser.add_argument('--width', type=int, default=None, help='window width in pixels')
    parser.add_argument('--height', type=int, default=None, help='window height in pixels')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--gpu', dest='use_gpu', action='store_const', const=True, default=None,
                      help='render through the PyTorch evaluator')
    mode.add_argument('--cpu', dest='use_gpu', action='store_const', const=False,
                      help='render with the Numba CPU sweep')
    parser.add_argument('--settings', type=str, default=None, help='path to a settings.json file')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run(args.width, args.height, args.use_gpu, load_settings(args.settings))


if __name__ == "__main__":
    main()
