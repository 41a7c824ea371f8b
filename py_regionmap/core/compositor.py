"""
Colouring of regions and clusters into an RGBA buffer.

The buffer is float32, shaped ``(height, width, 4)`` and indexed
``[y, x]``, with every channel in [0, 1]. Writing it anywhere is left to
an image sink.
"""

import numpy as np
import structlog
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .clusters import Cluster
from .errors import PreconditionViolation
from .regions import Grid, Region

logger = structlog.get_logger()

BLACK = (0.0, 0.0, 0.0, 1.0)
WHITE = (1.0, 1.0, 1.0, 1.0)

# Brightness multipliers for the five distance bands, nearest first
GRADIENT_FACTORS = np.array([0.2, 0.3, 0.4, 0.5, 0.6], dtype=np.float32)

# Marker arms: horizontal, vertical and both diagonals
MARKER_DIRECTIONS = [(1, 0), (0, 1), (-1, 1), (1, 1),
                     (-1, 0), (0, -1), (-1, -1), (1, -1)]


class DisplayMode(str, Enum):
    """How clustered cells are coloured."""
    REGION = "region"
    CLUSTER_SOLID = "cluster_solid"
    CLUSTER_PATTERN = "cluster_pattern"
    CLUSTER_GRADIENT = "cluster_gradient"

    @property
    def shows_clusters(self) -> bool:
        return self is not DisplayMode.REGION


def colour_regions(grid: Grid, regions: List[Region]) -> np.ndarray:
    """Buffer with every cell in its owning region's colour."""
    if not grid.is_fully_assigned():
        raise PreconditionViolation("Grid cells have not been allocated to regions")
    palette = np.array([region.colour for region in regions], dtype=np.float32)
    return palette[grid.owner]


def _member_cells(cluster: Cluster):
    for region in cluster.member_regions:
        if len(region.owned_cells):
            yield region.owned_cells[:, 0], region.owned_cells[:, 1]


def colour_cluster_solid(buffer: np.ndarray, cluster: Cluster) -> None:
    colour = np.asarray(cluster.colour, dtype=np.float32)
    for xs, ys in _member_cells(cluster):
        buffer[ys, xs] = colour


def colour_cluster_pattern(buffer: np.ndarray, cluster: Cluster) -> None:
    """Paint an alternating pixel mask; unpainted cells keep their colour.

    Even clusters paint cells with even x and odd y, odd clusters paint
    cells with even y.
    """
    colour = np.asarray(cluster.colour, dtype=np.float32)
    for xs, ys in _member_cells(cluster):
        if cluster.id % 2 == 0:
            mask = (xs % 2 == 0) & (ys % 2 != 0)
        else:
            mask = ys % 2 == 0
        buffer[ys[mask], xs[mask]] = colour


def colour_cluster_gradient(buffer: np.ndarray, grid: Grid, cluster: Cluster) -> None:
    """Shade cells by distance from the spine in five equal bands."""
    if cluster.max_distance is None:
        # no distance field to shade by
        colour_cluster_solid(buffer, cluster)
        return

    band = cluster.max_distance / 5
    colour = np.asarray(cluster.colour, dtype=np.float32)
    for xs, ys in _member_cells(cluster):
        distances = grid.distance_from_spine[ys, xs]
        if band > 0:
            buckets = np.minimum((distances / band).astype(np.int64), 4)
        else:
            buckets = np.zeros(len(distances), dtype=np.int64)
        shaded = np.repeat(colour[None, :], len(distances), axis=0)
        shaded[:, :3] *= GRADIENT_FACTORS[buckets][:, None]
        buffer[ys, xs] = shaded


def paint_spine_lines(buffer: np.ndarray, clusters: List[Cluster],
                      colour: Sequence[float] = WHITE) -> None:
    height, width = buffer.shape[:2]
    for cluster in clusters:
        for x, y in cluster.spine_points:
            if 0 <= x < width and 0 <= y < height:
                buffer[y, x] = colour


def paint_markers(buffer: np.ndarray, regions: List[Region], marker_size: int,
                  colour: Sequence[float] = BLACK) -> None:
    """Stamp an eight-armed marker of ``marker_size`` pixels on each centre.

    Pixels falling outside the buffer are skipped.
    """
    height, width = buffer.shape[:2]
    for region in regions:
        cx, cy = region.centre
        for i in range(marker_size):
            for dx, dy in MARKER_DIRECTIONS:
                x, y = cx + dx * i, cy + dy * i
                if 0 <= x < width and 0 <= y < height:
                    buffer[y, x] = colour
        logger.debug("Region centre marked", region=region.name, x=cx, y=cy)


def composite(grid: Grid, regions: List[Region], clusters: List[Cluster],
              mode: DisplayMode = DisplayMode.REGION,
              show_markers: bool = False, marker_size: int = 0,
              show_spine_lines: bool = False,
              report: Optional[Callable[[str], None]] = None) -> np.ndarray:
    """
    Produce the final colour buffer.

    Region colours are laid down first, cluster colouring for the chosen
    mode goes over them, then spine lines and finally markers; later
    layers win.

    Args:
        grid: Fully allocated grid
        regions: Regions owning the grid's cells
        clusters: Clusters, with distance fields for gradient mode
        mode: Display mode
        show_markers: Stamp region centre markers
        marker_size: Marker arm length in pixels
        show_spine_lines: Draw cluster spines in white
        report: Called with a label as each colouring phase starts

    Returns:
        float32 ``(height, width, 4)`` RGBA buffer
    """
    report = report or (lambda label: None)
    mode = DisplayMode(mode)

    report("Colouring regions.")
    buffer = colour_regions(grid, regions)

    if mode.shows_clusters:
        report("Colouring MegaRegions.")
    for cluster in clusters if mode.shows_clusters else []:
        if mode is DisplayMode.CLUSTER_SOLID:
            colour_cluster_solid(buffer, cluster)
        elif mode is DisplayMode.CLUSTER_PATTERN:
            colour_cluster_pattern(buffer, cluster)
        else:
            colour_cluster_gradient(buffer, grid, cluster)

    if show_spine_lines:
        paint_spine_lines(buffer, clusters)
    if show_markers:
        report("Painting markers.")
        paint_markers(buffer, regions, marker_size)

    return buffer
