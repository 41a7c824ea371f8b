"""
Grouping of nearby regions into clusters (MegaRegions).

A single greedy pass: each unclaimed region gathers every other unclaimed
region whose centre lies strictly inside the distance band around it.
Membership is judged against that first region only, so clusters are
star shaped rather than transitive groups. A true clustering would need
a different builder; this one keeps the order dependent behaviour.
"""

import numpy as np
import structlog
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .alea_prng import AleaPRNG
from .errors import InvalidArgument
from .regions import Colour, Region
from .voronoi_grid import point_distance

logger = structlog.get_logger()


@dataclass(eq=False)
class Cluster:
    """A group of regions merged for display (a MegaRegion).

    Members are references into the run's region list; the cluster owns
    only its spine points.
    """

    id: int
    colour: Colour
    member_regions: List[Region] = field(default_factory=list)
    spine_points: List[Tuple[int, int]] = field(default_factory=list)
    name: str = ""
    max_distance: Optional[int] = None

    def __post_init__(self):
        if not self.name:
            self.name = f"MegaRegion {self.id}"

    @property
    def member_ids(self) -> List[int]:
        return [region.id for region in self.member_regions]

    def spine_array(self) -> np.ndarray:
        """Spine points as an ``(m, 2)`` array of ``[x, y]``."""
        if not self.spine_points:
            return np.empty((0, 2), dtype=np.int64)
        return np.array(self.spine_points, dtype=np.int64)


def validate_threshold(threshold: Tuple[int, int]) -> Tuple[int, int]:
    """Check a ``(min, max)`` distance band, returning it as ints."""
    try:
        raw_low, raw_high = threshold
        low, high = int(raw_low), int(raw_high)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Threshold must be a (min, max) pair, got {threshold!r}") from exc
    if low != raw_low or high != raw_high:
        raise InvalidArgument(f"Threshold bounds must be whole numbers, got {threshold!r}")
    if low < 0:
        raise InvalidArgument(f"Threshold minimum must not be negative, got {low}")
    if low >= high:
        raise InvalidArgument(f"Threshold minimum {low} must be below maximum {high}")
    return low, high


def build_clusters(regions: List[Region], threshold: Tuple[int, int],
                   prng: AleaPRNG) -> List[Cluster]:
    """
    Group regions into clusters by a pairwise distance band.

    A pair qualifies when ``min < distance < max``. Regions are processed
    in input order and a claimed region is never reconsidered.

    Args:
        regions: Regions with centres set
        threshold: Exclusive ``(min, max)`` distance band
        prng: Random source for cluster colours

    Returns:
        Clusters with sequential ids, each holding at least two regions
    """
    low, high = validate_threshold(threshold)
    clusters: List[Cluster] = []

    for region in regions:
        if region.part_of_cluster:
            continue

        close_regions = [region]
        for other in regions:
            if other is region or other.part_of_cluster:
                continue
            distance = point_distance(region.centre, other.centre)
            if low < distance < high:
                close_regions.append(other)
                other.part_of_cluster = True

        if len(close_regions) > 1:
            region.part_of_cluster = True
            cluster = Cluster(id=len(clusters), colour=prng.colour(),
                              member_regions=list(close_regions))
            for member in close_regions:
                member.cluster_id = cluster.id
            clusters.append(cluster)
            logger.debug("MegaRegion created", cluster=cluster.name,
                         regions=len(close_regions))

    logger.info("MegaRegions created", clusters=len(clusters),
                clustered_regions=sum(len(c.member_regions) for c in clusters))
    return clusters
