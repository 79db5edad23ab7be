"""Group color cells into equal-size spatial clusters and parent/child trees.

A cell is one distinct non-edge color located at the centroid of all of its
pixels. Cells are clustered with a size-constrained k-means: seeds come from
k-means++ refined by `scipy.cluster.vq.kmeans2`, points are then dealt to
clusters of equal capacity (sizes differ by at most one) and pairs of points
are swapped between clusters while a swap brings both closer to their means.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.cluster.vq import kmeans2

from .blobs import find_blobs, merge_blob_groups
from .cleanup import remap_colors
from .colors import Color
from .pixel_codec import check_pixels

logger = logging.getLogger(__name__)

ROOT_COLOR = Color(96, 96, 96)
NODE_COLOR = Color(245, 245, 245)


@dataclass(frozen=True)
class Cell:
    """A distinct non-edge color and the ``(x, y)`` centroid of its pixels."""

    color: Color
    center: tuple


@dataclass(frozen=True)
class Cluster:
    parent: Cell
    cells: tuple


def find_cells(pixels, width, height):
    """One cell per non-edge color, in order of first appearance."""
    pixels = check_pixels(pixels, width, height)
    cells = []
    for blob in merge_blob_groups(find_blobs(pixels, width, height)):
        y, x = np.divmod(blob.indices, width)
        cells.append(Cell(blob.color, (float(x.mean()), float(y.mean()))))
    return cells


def cluster_capacities(count, amount):
    size, extra = divmod(count, amount)
    return [size + 1 if index < extra else size for index in range(amount)]


def _distances(points, means):
    return np.sqrt(((points[:, None, :] - means[None, :, :]) ** 2).sum(axis=2))


def _initial_means(points, amount, rng):
    chosen = [int(rng.integers(len(points)))]
    for _ in range(1, amount):
        nearest = (_distances(points, points[chosen]) ** 2).min(axis=1)
        nearest[chosen] = 0
        total = nearest.sum()
        if total > 0:
            chosen.append(int(rng.choice(len(points), p=nearest / total)))
        else:
            # every remaining point coincides with a chosen one
            free = np.setdiff1d(np.arange(len(points)), chosen)
            chosen.append(int(rng.choice(free)))
    means, _ = kmeans2(points, points[chosen], minit="matrix")
    return means


def _allocate(distances, capacities):
    """Deal points to their nearest cluster with room, most decided points first."""
    order = np.argsort(distances.min(axis=1) - distances.max(axis=1), kind="stable")
    remaining = list(capacities)
    allocation = np.empty(len(distances), dtype=np.intp)
    for index in order.tolist():
        for cluster in np.argsort(distances[index], kind="stable").tolist():
            if remaining[cluster] > 0:
                remaining[cluster] -= 1
                allocation[index] = cluster
                break
    return allocation


def _cluster_means(points, allocation, amount):
    return np.array([points[allocation == cluster].mean(axis=0) for cluster in range(amount)])


def _refine(points, allocation, amount, max_iterations):
    means = None
    for _ in range(max_iterations):
        next_means = _cluster_means(points, allocation, amount)
        if means is not None and np.array_equal(next_means, means):
            break
        means = next_means
        distances = _distances(points, means)
        current = distances[np.arange(len(points)), allocation]
        best = distances.argmin(axis=1)
        gain = current - distances.min(axis=1)
        swapped = np.zeros(len(points), dtype=bool)
        made_swap = False
        for index in np.argsort(-gain, kind="stable").tolist():
            own = int(allocation[index])
            target = int(best[index])
            if target == own or swapped[index]:
                continue
            others = np.flatnonzero((allocation == target) & ~swapped)
            if not len(others):
                continue
            other_gain = distances[others, target] - distances[others, own]
            pick = int(np.argmax(other_gain))
            if gain[index] + other_gain[pick] <= 0:
                continue
            other = int(others[pick])
            allocation[index] = target
            allocation[other] = own
            swapped[index] = swapped[other] = True
            made_swap = True
        if not made_swap:
            break
    return allocation


def equal_size_kmeans(points, amount, max_iterations=100, rng=None):
    """Label each point with one of ``amount`` clusters whose sizes differ by at most one.

    ``amount`` is capped at the number of points.
    """
    if amount < 1:
        raise ValueError(f"Amount of clusters must be at least 1, got {amount}")
    points = np.asarray(points, dtype=np.float64)
    if len(points) == 0:
        return np.zeros(0, dtype=np.intp)
    points = points.reshape(len(points), -1)
    amount = min(amount, len(points))
    if amount == 1:
        return np.zeros(len(points), dtype=np.intp)
    rng = np.random.default_rng(rng)
    means = _initial_means(points, amount, rng)
    allocation = _allocate(_distances(points, means), cluster_capacities(len(points), amount))
    return _refine(points, allocation, amount, max_iterations)


def group_cells(cells, amount, max_iterations=100, rng=None):
    """Split ``cells`` into spatially compact groups of near-equal size."""
    allocation = equal_size_kmeans([cell.center for cell in cells], amount, max_iterations, rng)
    return [
        [cells[index] for index in np.flatnonzero(allocation == label).tolist()]
        for label in np.unique(allocation).tolist()
    ]


def cluster_cells(cells, amount, max_iterations=100, rng=None):
    """Group cells and promote a random member of each group to parent."""
    rng = np.random.default_rng(rng)
    clusters = []
    for group in group_cells(cells, amount, max_iterations, rng):
        parent = group.pop(int(rng.integers(len(group))))
        clusters.append(Cluster(parent, tuple(group)))
    return clusters


def paint_clusters(pixels, width, height, amount, max_iterations=100, node_color=NODE_COLOR, rng=None):
    """Paint every cell with its cluster parent's color and every parent with ``node_color``.

    Returns ``(out, clusters)``.
    """
    pixels = check_pixels(pixels, width, height)
    clusters = cluster_cells(find_cells(pixels, width, height), amount, max_iterations, rng)
    mapping = {}
    for group in clusters:
        for cell in group.cells:
            mapping[cell.color] = group.parent.color
        mapping[group.parent.color] = Color(*node_color)
    logger.debug("Built %d clusters", len(clusters))
    return remap_colors(pixels, mapping), clusters


def paint_allocation(pixels, width, height, amount, max_iterations=100, root_color=ROOT_COLOR, rng=None):
    """Arrange all cells in a tree and paint each cell with its parent's color.

    A random cell becomes the child of ``root_color``; the rest are grouped
    into ``amount`` clusters that each repeat the process under that cell.
    Returns ``(out, parent_by_color)``.
    """
    pixels = check_pixels(pixels, width, height)
    rng = np.random.default_rng(rng)
    parent_by_color = {}
    stack = [(find_cells(pixels, width, height), Color(*root_color))]
    while stack:
        bucket, parent_color = stack.pop()
        if not bucket:
            continue
        child = bucket.pop(int(rng.integers(len(bucket))))
        parent_by_color[child.color] = parent_color
        if bucket:
            for group in group_cells(bucket, amount, max_iterations, rng):
                stack.append((group, child.color))
    logger.debug("Allocated %d cells", len(parent_by_color))
    return remap_colors(pixels, parent_by_color), parent_by_color
