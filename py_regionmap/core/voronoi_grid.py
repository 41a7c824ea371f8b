"""
Discrete Voronoi assignment of grid cells to regions.

Every cell is owned by the region whose centre is nearest by integer
truncated Euclidean distance. The scan is brute force over all regions
for every cell; ties go to the region that comes first in the sequence.
"""

import numpy as np
import structlog
from concurrent.futures import ThreadPoolExecutor
from scipy.spatial.distance import cdist
from typing import List, Sequence, Tuple

from .errors import PreconditionViolation, ResourceExhaustion
from .regions import Grid, Region, region_centres

logger = structlog.get_logger()

# Upper bound on distance matrix entries evaluated per task
MAX_CHUNK_ENTRIES = 1 << 22


def point_distance(p1: Sequence[int], p2: Sequence[int]) -> int:
    """Distance between two points, truncated to an int."""
    dx = int(p1[0]) - int(p2[0])
    dy = int(p1[1]) - int(p2[1])
    return int(np.sqrt(dx * dx + dy * dy))


def truncated_distances(points: np.ndarray, targets: np.ndarray) -> np.ndarray:
    """
    Pairwise truncated distances between two point sets.

    Args:
        points: ``(k, 2)`` integer coordinates
        targets: ``(m, 2)`` integer coordinates

    Returns:
        ``(k, m)`` int64 array
    """
    # Squared distances of integer points are exact in float64, so flooring
    # the correctly rounded sqrt matches integer truncation.
    return np.floor(cdist(points, targets)).astype(np.int64)


def _row_bands(width: int, height: int, n_regions: int,
               workers: int = 1) -> List[Tuple[int, int]]:
    """Split rows into bands bounded by memory, at least one per worker."""
    rows = max(1, MAX_CHUNK_ENTRIES // max(1, width * n_regions))
    rows = min(rows, -(-height // max(1, workers)))
    return [(y0, min(y0 + rows, height)) for y0 in range(0, height, rows)]


def _nearest_for_rows(grid: Grid, centres: np.ndarray, y0: int, y1: int) -> None:
    """Write the nearest region index for rows ``y0..y1`` into the grid."""
    ys, xs = np.mgrid[y0:y1, 0:grid.width]
    points = np.column_stack([xs.ravel(), ys.ravel()])
    distances = truncated_distances(points, centres)
    # argmin keeps the first minimum, which is the sequence order tie break
    grid.owner[y0:y1, :] = np.argmin(distances, axis=1).reshape(y1 - y0, grid.width)


def find_owner(point: Sequence[int], regions: List[Region]) -> Region:
    """Nearest region to a single point, first region winning ties."""
    if not regions:
        raise PreconditionViolation("Cannot find an owner among zero regions")
    closest = regions[0]
    closest_distance = point_distance(point, closest.centre)
    for region in regions:
        distance = point_distance(point, region.centre)
        if distance < closest_distance:
            closest = region
            closest_distance = distance
    return closest


def allocate_cells(regions: List[Region], grid: Grid, workers: int = 1) -> Grid:
    """
    Assign every grid cell to its nearest region.

    Row bands are evaluated independently (in a thread pool when
    ``workers > 1``) into the grid's owner array, then a sequential pass
    groups cell positions into each region's ``owned_cells``.

    Args:
        regions: Non-empty region sequence; order decides ties
        grid: Freshly allocated grid
        workers: Number of worker threads

    Returns:
        The populated grid

    Raises:
        PreconditionViolation: If ``regions`` is empty
        ResourceExhaustion: If a distance band cannot be allocated
    """
    if not regions:
        raise PreconditionViolation("Cannot allocate cells without any regions")

    logger.info("Allocating cells", width=grid.width, height=grid.height,
                regions=len(regions), workers=workers)

    centres = region_centres(regions)
    bands = _row_bands(grid.width, grid.height, len(regions), workers)
    logger.debug("Cell allocation bands", bands=len(bands))

    try:
        if workers > 1 and len(bands) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [
                    pool.submit(_nearest_for_rows, grid, centres, y0, y1)
                    for y0, y1 in bands
                ]
                for future in futures:
                    future.result()
        else:
            for y0, y1 in bands:
                _nearest_for_rows(grid, centres, y0, y1)
    except MemoryError as exc:
        raise ResourceExhaustion(
            f"Out of memory assigning {grid.size} cells to {len(regions)} regions"
        ) from exc

    _group_owned_cells(regions, grid)
    return grid


def _group_owned_cells(regions: List[Region], grid: Grid) -> None:
    """Sequential reduction of the owner array into region cell lists."""
    flat_owner = grid.owner.ravel()
    order = np.argsort(flat_owner, kind="stable")
    counts = np.bincount(flat_owner, minlength=len(regions))
    ys, xs = np.divmod(order, grid.width)
    cells = np.column_stack([xs, ys]).astype(np.int32)

    for region, owned in zip(regions, np.split(cells, np.cumsum(counts)[:-1])):
        region.owned_cells = owned
        logger.debug("Region cells allocated", region=region.name,
                     cells=len(owned))
