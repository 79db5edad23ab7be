"""Whole-image operations: encoded image in, encoded image (or report) out.

Every operation is synchronous and keeps no state between calls. Callers that
need a responsive front end run them on a worker thread and wait for one to
finish before starting the next on the same image.
"""

import logging
from dataclasses import dataclass

from .blobs import color_counts, find_blobs
from .border import trace_border
from .cleanup import check_sizes, colonize, mark_edge_contact, merge_colors, split_blobs
from .clustering import NODE_COLOR, ROOT_COLOR, paint_allocation, paint_clusters
from .colors import Color, ColorGenerator, is_edge
from .image_loading import build_image, load_image
from .recolor import recolor_blobs
from .report import format_log, points_by_color
from .tiers import assign_tiers

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ImageInfo:
    """Decoded pixels plus per-color pixel counts."""

    pixels: object
    width: int
    height: int
    non_edge_colors: frozenset
    size_by_color: dict

    def locate(self, x, y):
        """Color at ``(x, y)``, or None outside the image."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return Color(*self.pixels[y * self.width + x].tolist())


def info(image):
    pixels, width, height = load_image(image)
    size_by_color = color_counts(pixels)
    non_edge = frozenset(color for color in size_by_color if not is_edge(color))
    logger.info("Loaded %dx%d image with %d non-edge colors", width, height, len(non_edge))
    return ImageInfo(pixels, width, height, non_edge, size_by_color)


def log(image, path=None):
    """Text report of every non-edge color, least frequent first.

    The report is also written to ``path`` when one is given.
    """
    pixels, width, height = load_image(image)
    text = format_log(points_by_color(pixels, width, height))
    if path is not None:
        with open(path, "w") as f:
            f.write(text)
    return text


def repaint(image, contiguous=True, seed=None):
    """Give every blob (or every original color) a fresh random color."""
    pixels, width, height = load_image(image)
    blobs = find_blobs(pixels, width, height)
    logger.info("Found %d blobs in %dx%d image", len(blobs), width, height)
    generator = ColorGenerator(seed, reserved=color_counts(pixels))
    out = recolor_blobs(pixels, blobs, contiguous=contiguous, generator=generator)
    return build_image(out, width, height)


def border(image, border_color, opacity=None):
    pixels, width, height = load_image(image)
    out = trace_border(pixels, width, height, border_color, opacity=opacity)
    return build_image(out, width, height)


def extract(image, seed=None):
    """Recolor by rarity tier; see `blobpaint.core.tiers`."""
    pixels, width, height = load_image(image)
    out, tier_by_color = assign_tiers(pixels, width, height, rng=seed)
    logger.info("Ranked %d colors into tiers", len(tier_by_color))
    return build_image(out, width, height)


def check(image, min_blob_size, max_blob_size, isle_blob_size):
    pixels, width, height = load_image(image)
    out = check_sizes(pixels, width, height, min_blob_size, max_blob_size, isle_blob_size)
    return build_image(out, width, height)


def edge(image, contiguous=False):
    pixels, width, height = load_image(image)
    out = mark_edge_contact(pixels, width, height, contiguous=contiguous)
    return build_image(out, width, height)


def merge(image, min_blob_size, max_blob_size, isle_blob_size):
    pixels, width, height = load_image(image)
    out = merge_colors(pixels, width, height, min_blob_size, max_blob_size, isle_blob_size)
    return build_image(out, width, height)


def split(image, min_blob_size, max_blob_size, contiguous=True, seed=None):
    pixels, width, height = load_image(image)
    out = split_blobs(
        pixels, width, height, min_blob_size, max_blob_size, contiguous=contiguous, seed=seed
    )
    return build_image(out, width, height)


def colony(image, isle_blob_size):
    pixels, width, height = load_image(image)
    out = colonize(pixels, width, height, isle_blob_size)
    return build_image(out, width, height)


def cluster(image, amount_of_clusters, max_iterations=100, node_color=NODE_COLOR, seed=None):
    """Group cells into clusters; each cell takes its parent's color, parents ``node_color``."""
    pixels, width, height = load_image(image)
    out, clusters = paint_clusters(
        pixels, width, height, amount_of_clusters, max_iterations, node_color=node_color, rng=seed
    )
    logger.info("Grouped cells into %d clusters", len(clusters))
    return build_image(out, width, height)


def allocate(image, amount_of_clusters, max_iterations=100, root_color=ROOT_COLOR, seed=None):
    """Arrange cells in a parent/child tree; each cell takes its parent's color."""
    pixels, width, height = load_image(image)
    out, _ = paint_allocation(
        pixels, width, height, amount_of_clusters, max_iterations, root_color=root_color, rng=seed
    )
    return build_image(out, width, height)
