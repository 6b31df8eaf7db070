"""
Tests for the command line parser.
"""

from rational_julia.__main__ import build_parser


class TestParser:

    def test_defaults_defer_to_settings(self):
        args = build_parser().parse_args([])
        assert args.width is None
        assert args.height is None
        assert args.use_gpu is None
        assert args.settings is None
        assert not args.verbose

    def test_mode_flags(self):
        assert build_parser().parse_args(["--gpu"]).use_gpu is True
        assert build_parser().parse_args(["--cpu"]).use_gpu is False

    def test_size(self):
        args = build_parser().parse_args(["--width", "320", "--height", "200", "-v"])
        assert (args.width, args.height, args.verbose) == (320, 200, True)
