"""
Main entry point for the depth-to-pointcloud converter

Reads the Z buffer of an OpenEXR image and writes an ASCII .pcd point cloud.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from depth_pointcloud.data_models import NORMALIZATIONS
from depth_pointcloud.exceptions import DepthPointCloudError, UsageError
from depth_pointcloud.formats.exr_reader import ExrDepthReader
from depth_pointcloud.formats.pcd_writer import PCDWriter
from depth_pointcloud.reconstruction.point_sampler import PointSampler
from depth_pointcloud.utils.argument_parser import parse_option
from depth_pointcloud.utils.config_manager import ConfigManager

logger = logging.getLogger("depth_pointcloud")

# (flag, config key, conversion, validity check, expected value)
OPTIONS = [
    ("--sensor-width", "camera.sensor_width", float, lambda v: v > 0, "float > 0"),
    ("--focal-length", "camera.focal_length", float, lambda v: v > 0, "float > 0"),
    ("--normalization", "camera.normalization", str, lambda v: v in NORMALIZATIONS,
     " or ".join(NORMALIZATIONS)),
    ("--upper-cut", "sampling.upper_cut", float, None, "float"),
    ("--lower-cut", "sampling.lower_cut", float, None, "float"),
    ("--keep-fraction", "sampling.keep_fraction", float, lambda v: 0.0 <= v <= 1.0, "float in [0, 1]"),
    ("--add-noise", "sampling.noise_stddev", float, lambda v: v >= 0.0, "float >= 0"),
    ("--rgb", "sampling.point_color", float, None, "float"),
    ("--seed", "sampling.seed", int, lambda v: v >= 0, "non-negative integer"),
]

EXAMPLES = """\
Example 1:
  depth-to-pointcloud --input image.exr --output pointcloud.pcd

Example 2 (keep 50% of points, add noise with standard deviation 2.0):
  depth-to-pointcloud --input image.exr --output pointcloud.pcd \\
    --sensor-width 10 --focal-length 42 --keep-fraction 0.5 --add-noise 2.0 \\
    --lower-cut 100 --upper-cut 65500

Example 3 (output will default to image.pcd):
  depth-to-pointcloud --input image.exr
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="depth-to-pointcloud",
        description="OpenEXR with Z Buffer to PCD point cloud converter.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False
    )

    parser.add_argument("-h", "--help", action="store_true", help="Print this message")
    parser.add_argument("--input", type=str, nargs="?", const="", help="Source OpenEXR image with a Z channel")
    parser.add_argument(
        "--output",
        type=str,
        nargs="?",
        const="",
        help="Destination .pcd file (default: input path with a .pcd extension)"
    )
    parser.add_argument("--config", type=str, nargs="?", const="", help="YAML file overriding the default configuration")

    # Numeric values are parsed leniently after argparse so bad input only warns;
    # a flag given without a value arrives as "" and falls back to the default
    parser.add_argument("--sensor-width", nargs="?", const="", metavar="<float>", help="Pinhole-camera sensor width in mm [36]")
    parser.add_argument("--focal-length", nargs="?", const="", metavar="<float>", help="Pinhole-camera focal length in mm [50]")
    parser.add_argument(
        "--normalization",
        nargs="?",
        const="",
        metavar="{unit,focal}",
        help="Ray normalization: unit length or divide by focal length [unit]"
    )
    parser.add_argument("--upper-cut", nargs="?", const="", metavar="<float>", help="Cuts off points too far away [inf]")
    parser.add_argument("--lower-cut", nargs="?", const="", metavar="<float>", help="Cuts off points too close [-inf]")
    parser.add_argument("--keep-fraction", nargs="?", const="", metavar="<float>", help="Fraction of points kept, in [0,1] [1.0]")
    parser.add_argument("--add-noise", nargs="?", const="", metavar="<float>", help="Gaussian noise standard deviation [0.0]")
    parser.add_argument("--rgb", nargs="?", const="", metavar="<float>", help="Packed color of the points [4.2108e+06]")
    parser.add_argument("--seed", nargs="?", const="", metavar="<int>", help="Seed for reproducible sampling and noise")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


VALUE_FLAGS = ["--input", "--output", "--config"] + [flag for flag, *_ in OPTIONS]


def join_option_values(argv: List[str]) -> List[str]:
    """
    Attach the token following each value-taking flag as `flag=value`.

    argparse reads tokens such as `-inf` or `-1e3` as option names, so the
    value is bound to its flag before parsing. A following token that is
    itself a long option is left alone.

    Args:
        argv: Raw command line arguments

    Returns:
        Arguments with flag values joined
    """
    joined = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in VALUE_FLAGS and i + 1 < len(argv) and not argv[i + 1].startswith("--"):
            joined.append(f"{token}={argv[i + 1]}")
            i += 2
        else:
            joined.append(token)
            i += 1
    return joined


def apply_overrides(config: ConfigManager, args: argparse.Namespace) -> None:
    """Copy command line values into the configuration."""
    for flag, key, convert, is_valid, expected in OPTIONS:
        raw = getattr(args, flag.lstrip('-').replace('-', '_'))
        if raw is None:
            continue
        value = parse_option(flag, raw, config.get(key), convert, is_valid, expected)
        config.set(key, value)


def default_output_path(input_path: str) -> Path:
    """Input path with its extension replaced by .pcd."""
    return Path(input_path).with_suffix(".pcd")


def run(args: argparse.Namespace) -> int:
    """
    Run one conversion.

    Args:
        args: Parsed command line arguments

    Returns:
        Process exit code
    """
    if not args.input:
        raise UsageError("no input file given")

    config = ConfigManager(args.config or None)
    logger.debug(f"Loaded configuration from: {config.config_path}")

    if not args.verbose:
        logging.getLogger().setLevel(config.get('logging.level', 'INFO'))

    apply_overrides(config, args)
    converter_config = config.to_converter_config()

    output_path = Path(args.output) if args.output else default_output_path(args.input)

    reader = ExrDepthReader(config.get('input.depth_channel', 'Z'))
    grid = reader.read(args.input)

    sampler = PointSampler(converter_config)
    cloud = sampler.sample(grid)

    PCDWriter().write(output_path, cloud)

    logger.info(f"Converted {args.input} -> {output_path}: {cloud.point_count} points")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the depth-to-pointcloud converter."""
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args, unknown = parser.parse_known_args(join_option_values(argv))

    if not argv or args.help:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    for arg in unknown:
        logger.warning(f"Ignoring unrecognized argument: {arg}")

    try:
        return run(args)
    except (DepthPointCloudError, OSError, ValueError) as e:
        logger.error(f"Error, {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
