"""Core package for blob segmentation and recoloring."""

from .pixel_codec import PixelFormatError, decode, encode, pack_pixels, unpack_keys
from .colors import Color, ColorGenerator, is_edge, edge_mask, WHITE, BLACK, TRANSPARENT
from .image_loading import load_image, build_image
from .blobs import Blob, find_blobs, group_blobs_by_color, neighbors_by_color, isolated_colors
from .recolor import recolor_blobs
from .border import trace_border
from .tiers import assign_tiers, tier_for_rank, TIER_CAPACITIES, CUMULATIVE_CAPACITIES, TIER_COLORS
from .report import points_by_color, format_log
from .cleanup import check_sizes, mark_edge_contact, merge_colors, split_blobs, colonize
from .settings import Settings, save_settings, load_settings
from .operations import ImageInfo
from .clustering import Cell, Cluster, find_cells, equal_size_kmeans, group_cells, cluster_cells
from .clustering import paint_clusters, paint_allocation, ROOT_COLOR, NODE_COLOR
