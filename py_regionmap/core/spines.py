"""
Spine construction through cluster members.

Each member is linked to its nearest cluster-mate that has not already
been used as a link destination, and the connecting segment is sampled
into spine points. The chaining is greedy and order dependent, so the
result can be disconnected and is not a minimum spanning tree.
"""

import numpy as np
import structlog
from typing import List, Optional, Sequence, Tuple

from .clusters import Cluster
from .errors import InvalidArgument
from .regions import Region
from .voronoi_grid import point_distance

logger = structlog.get_logger()


def sample_segment(start: Sequence[int], end: Sequence[int],
                   samples: int) -> List[Tuple[int, int]]:
    """
    Sample ``samples`` evenly spaced points from ``start`` towards ``end``.

    The start point itself is not emitted; the last sample is ``end``.
    Coordinates are rounded half to even.
    """
    if samples < 1:
        raise InvalidArgument(f"Segment needs at least one sample, got {samples}")
    start_arr = np.asarray(start, dtype=np.float64)
    delta = np.asarray(end, dtype=np.float64) - start_arr
    steps = np.arange(1, samples + 1, dtype=np.float64)[:, None] / samples
    points = np.rint(start_arr + steps * delta).astype(np.int64)
    return [(int(x), int(y)) for x, y in points]


def _nearest_unlinked(region: Region, members: List[Region]) -> Optional[Region]:
    closest = None
    closest_distance = -1
    for other in members:
        if other is region or other.spine_linked:
            continue
        distance = point_distance(region.centre, other.centre)
        if closest is None or distance < closest_distance:
            closest = other
            closest_distance = distance
    return closest


def build_spine(cluster: Cluster, line_point_density: int = 20,
                solid_line: bool = False) -> List[Tuple[int, int]]:
    """
    Build the spine of one cluster.

    Args:
        cluster: Cluster whose members have centres set
        line_point_density: Samples per segment
        solid_line: Sample one point per unit of truncated distance instead

    Returns:
        The cluster's spine points (also appended to ``cluster.spine_points``)
    """
    if line_point_density < 1 and not solid_line:
        raise InvalidArgument(
            f"Line point density must be at least 1, got {line_point_density}"
        )

    for region in cluster.member_regions:
        target = _nearest_unlinked(region, cluster.member_regions)
        if target is None or target.centre == region.centre:
            continue

        target.spine_linked = True
        if solid_line:
            samples = max(1, point_distance(region.centre, target.centre))
        else:
            samples = line_point_density
        cluster.spine_points.extend(sample_segment(region.centre, target.centre, samples))

    if not cluster.spine_points:
        logger.warning("MegaRegion has no spine", cluster=cluster.name,
                       regions=len(cluster.member_regions))
    return cluster.spine_points


def build_spines(clusters: List[Cluster], line_point_density: int = 20,
                 solid_line: bool = False) -> None:
    """Build spines for every cluster in order."""
    for cluster in clusters:
        build_spine(cluster, line_point_density, solid_line)
    logger.info("MegaRegion spines built", clusters=len(clusters),
                spine_points=sum(len(c.spine_points) for c in clusters))
