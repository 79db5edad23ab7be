"""Command-line interface for blobpaint."""

import argparse
import dataclasses
import io
import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt
from PIL import Image

from .core import PixelFormatError, Settings, load_settings
from .core import operations


def parse_color(text):
    """Parse ``R,G,B`` or ``R,G,B,A``."""
    try:
        channels = tuple(int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid color: {text}") from None
    if len(channels) not in (3, 4) or not all(0 <= c <= 255 for c in channels):
        raise argparse.ArgumentTypeError(f"Invalid color: {text}")
    return channels


def build_parser():
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("image", help="Path to the image file.")
    common.add_argument("-o", "--output", help="Output path (default: next to the image).")
    common.add_argument("-c", "--settings", help="Path to settings YAML file.")
    common.add_argument("--seed", type=int, help="Seed for random colors and tie breaks.")
    common.add_argument("--show", action="store_true", help="Display the result.")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")

    sizes = argparse.ArgumentParser(add_help=False)
    sizes.add_argument("--min", dest="min_blob_size", type=int, help="Minimum blob size.")
    sizes.add_argument("--max", dest="max_blob_size", type=int, help="Maximum blob size.")
    sizes.add_argument("--isle", dest="isle_blob_size", type=int, help="Minimum isolated blob size.")

    clusters = argparse.ArgumentParser(add_help=False)
    clusters.add_argument("--clusters", dest="amount_of_clusters", type=int, help="Amount of clusters.")
    clusters.add_argument("--iterations", dest="max_iterations", type=int, help="Maximum refinement iterations.")

    parser = argparse.ArgumentParser(description="Segment and recolor flat-color images.")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("info", parents=[common], help="Print image and color statistics.")
    commands.add_parser("log", parents=[common], help="Dump every color with its points.")
    repaint = commands.add_parser("repaint", parents=[common], help="Random color per blob.")
    repaint.add_argument("--grouped", action="store_true", help="One color per original color.")
    border = commands.add_parser("border", parents=[common], help="Outline color boundaries.")
    border.add_argument("--border-color", type=parse_color, help="Border color as R,G,B[,A].")
    border.add_argument("--opacity", dest="border_opacity", type=float, help="Overlay opacity.")
    commands.add_parser("extract", parents=[common], help="Gray tiers by color rarity.")
    commands.add_parser("check", parents=[common, sizes], help="Flag blobs of wrong size.")
    edge = commands.add_parser("edge", parents=[common], help="Flag blobs touching edges.")
    edge.add_argument("--contiguous", action="store_true", help="Decide per blob.")
    commands.add_parser("merge", parents=[common, sizes], help="Merge small colors.")
    split = commands.add_parser("split", parents=[common, sizes], help="Split large blobs.")
    split.add_argument("--grouped", action="store_true", help="Split whole colors.")
    commands.add_parser("colony", parents=[common, sizes], help="Join isolated blobs.")
    commands.add_parser("cluster", parents=[common, clusters], help="Group colors into clusters.")
    commands.add_parser("allocate", parents=[common, clusters], help="Build a parent/child color tree.")
    return parser


def resolve_settings(args):
    """Settings file values overridden by any flag given on the command line."""
    settings = load_settings(args.settings) if args.settings else Settings()
    overrides = {
        field.name: getattr(args, field.name)
        for field in dataclasses.fields(Settings)
        if getattr(args, field.name, None) is not None
    }
    return dataclasses.replace(settings, **overrides)


def run_command(args, settings, image_data):
    """Run the selected operation, return PNG bytes, report text or ImageInfo."""
    command = args.command
    if command == "info":
        return operations.info(image_data)
    if command == "log":
        return operations.log(image_data)
    if command == "repaint":
        return operations.repaint(image_data, contiguous=not args.grouped, seed=settings.seed)
    if command == "border":
        return operations.border(image_data, settings.border_color, opacity=settings.border_opacity)
    if command == "extract":
        return operations.extract(image_data, seed=settings.seed)
    if command == "check":
        return operations.check(
            image_data, settings.min_blob_size, settings.max_blob_size, settings.isle_blob_size
        )
    if command == "edge":
        return operations.edge(image_data, contiguous=args.contiguous)
    if command == "merge":
        return operations.merge(
            image_data, settings.min_blob_size, settings.max_blob_size, settings.isle_blob_size
        )
    if command == "split":
        return operations.split(
            image_data,
            settings.min_blob_size,
            settings.max_blob_size,
            contiguous=not args.grouped,
            seed=settings.seed,
        )
    if command == "colony":
        return operations.colony(image_data, settings.isle_blob_size)
    if command == "cluster":
        return operations.cluster(
            image_data,
            settings.amount_of_clusters,
            settings.max_iterations,
            node_color=settings.node_color,
            seed=settings.seed,
        )
    if command == "allocate":
        return operations.allocate(
            image_data,
            settings.amount_of_clusters,
            settings.max_iterations,
            root_color=settings.root_color,
            seed=settings.seed,
        )
    raise ValueError(f"Unknown command: {command}")


def default_output(image_path, command):
    path = Path(image_path)
    suffix = ".txt" if command == "log" else ".png"
    return path.with_name(f"{path.stem}_{command}{suffix}")


def print_info(image_info):
    print(f"Size: {image_info.width}x{image_info.height}")
    print(f"Non-edge colors: {len(image_info.non_edge_colors)}")
    for color, count in sorted(image_info.size_by_color.items(), key=lambda item: item[1]):
        print(f"  {color.r},{color.g},{color.b},{color.a}: {count}")


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = resolve_settings(args)
    except (OSError, ValueError) as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        image_data = Path(args.image).read_bytes()
        result = run_command(args, settings, image_data)
    except (OSError, PixelFormatError) as e:
        print(f"Error loading image: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error running {args.command}: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "info":
        print_info(result)
        return

    output = Path(args.output) if args.output else default_output(args.image, args.command)
    if args.command == "log":
        output.write_text(result)
    else:
        output.write_bytes(result)
    print(f"Wrote {output}")

    if args.show and args.command != "log":
        fig, ax = plt.subplots()
        ax.imshow(Image.open(io.BytesIO(result)))
        ax.set_title(f"{args.command}: {Path(args.image).name}")
        plt.show()


if __name__ == "__main__":
    main()
