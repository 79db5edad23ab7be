"""Paint blobs with freshly generated colors."""

import logging

import numpy as np

from .blobs import group_blobs_by_color
from .colors import ColorGenerator

logger = logging.getLogger(__name__)


def recolor_blobs(pixels, blobs, contiguous=True, generator=None):
    """Return a copy of ``pixels`` with every blob repainted.

    In contiguous mode each blob gets its own color, even when several blobs
    share an original color. Otherwise one color is drawn per original color
    and shared by all of its blobs. Pixels outside every blob (edge pixels)
    keep their value.
    """
    out = np.array(pixels, dtype=np.uint8, copy=True).reshape(-1, 4)
    if generator is None:
        generator = ColorGenerator()
    if contiguous:
        for blob in blobs:
            out[blob.indices] = generator.next_color()
    else:
        groups = group_blobs_by_color(blobs)
        for group in groups.values():
            color = generator.next_color()
            for blob in group:
                out[blob.indices] = color
    logger.debug(
        "Recolored %d blobs (%s mode)", len(blobs), "contiguous" if contiguous else "grouped"
    )
    return out
