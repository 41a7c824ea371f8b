"""Per-cell distance from cluster spines, used for gradient shading."""

import numpy as np
import structlog
from typing import List, Optional

from .clusters import Cluster
from .errors import PreconditionViolation, ResourceExhaustion
from .regions import Grid
from .voronoi_grid import MAX_CHUNK_ENTRIES, truncated_distances

logger = structlog.get_logger()


def cluster_cells(cluster: Cluster) -> np.ndarray:
    """All ``[x, y]`` cells owned by the cluster's members."""
    owned = [region.owned_cells for region in cluster.member_regions]
    if not owned:
        return np.empty((0, 2), dtype=np.int32)
    return np.concatenate(owned, axis=0)


def compute_distance_field(cluster: Cluster, grid: Grid,
                           strict: bool = False) -> Optional[int]:
    """
    Store each member cell's distance to the nearest spine point.

    Args:
        cluster: Cluster with spine points built
        grid: Grid whose ``distance_from_spine`` is written
        strict: Raise instead of skipping when the spine is empty

    Returns:
        Largest distance written, or None when the cluster has no spine

    Raises:
        PreconditionViolation: If ``strict`` and the spine is empty
        ResourceExhaustion: If a distance chunk cannot be allocated
    """
    spine = cluster.spine_array()
    if len(spine) == 0:
        if strict:
            raise PreconditionViolation(f"{cluster.name} has no spine points")
        logger.warning("Skipping distance field, no spine points",
                       cluster=cluster.name)
        return None

    cells = cluster_cells(cluster)
    if len(cells) == 0:
        cluster.max_distance = 0
        return 0

    rows = max(1, MAX_CHUNK_ENTRIES // len(spine))
    max_distance = 0
    try:
        for start in range(0, len(cells), rows):
            chunk = cells[start:start + rows]
            nearest = truncated_distances(chunk, spine).min(axis=1)
            grid.distance_from_spine[chunk[:, 1], chunk[:, 0]] = nearest
            max_distance = max(max_distance, int(nearest.max()))
    except MemoryError as exc:
        raise ResourceExhaustion(
            f"Out of memory computing distances for {cluster.name}"
        ) from exc

    cluster.max_distance = max_distance
    logger.debug("Distance field computed", cluster=cluster.name,
                 cells=len(cells), max_distance=max_distance)
    return max_distance


def compute_distance_fields(clusters: List[Cluster], grid: Grid) -> None:
    """Compute the distance field of every cluster, skipping empty spines."""
    computed = 0
    for cluster in clusters:
        if compute_distance_field(cluster, grid) is not None:
            computed += 1
    logger.info("Spine distances calculated", clusters=len(clusters),
                computed=computed)
