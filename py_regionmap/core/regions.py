"""
Region, cell and grid data model plus seed point generation.

Cells are not stored as objects: the grid keeps one owner index and one
spine distance per pixel in NumPy arrays, and ``Grid.cell`` hands out a
read-only view when a single cell is needed.
"""

import numpy as np
import structlog
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from .alea_prng import AleaPRNG
from .errors import InvalidArgument, ResourceExhaustion

logger = structlog.get_logger()

# Marker for cells whose distance from a spine was never computed
UNSET_DISTANCE = -1

Colour = Tuple[float, float, float, float]


class Cell(NamedTuple):
    """Read-only view of one grid position."""
    position: Tuple[int, int]
    owner: int
    distance_from_spine: Optional[int]


@dataclass(eq=False)
class Region:
    """A seed point and the grid cells nearest to it."""

    id: int
    centre: Tuple[int, int]
    colour: Colour
    name: str = ""
    owned_cells: np.ndarray = field(
        default_factory=lambda: np.empty((0, 2), dtype=np.int32)
    )  # [x, y] rows
    part_of_cluster: bool = False
    spine_linked: bool = False
    cluster_id: Optional[int] = None

    def __post_init__(self):
        if not self.name:
            self.name = f"Region {self.id}"

    @property
    def cell_count(self) -> int:
        return len(self.owned_cells)


@dataclass
class Grid:
    """Dense ``height x width`` cell storage owned by a single generation run.

    Arrays are indexed ``[y, x]``.
    """

    width: int
    height: int
    owner: np.ndarray
    distance_from_spine: np.ndarray

    @classmethod
    def allocate(cls, width: int, height: int) -> "Grid":
        """Allocate an unassigned grid.

        Raises:
            InvalidArgument: If either dimension is not positive
            ResourceExhaustion: If the arrays cannot be allocated
        """
        if width <= 0 or height <= 0:
            raise InvalidArgument(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        try:
            owner = np.full((height, width), -1, dtype=np.int32)
            distance = np.full((height, width), UNSET_DISTANCE, dtype=np.int32)
        except MemoryError as exc:
            raise ResourceExhaustion(
                f"Cannot allocate a {width}x{height} grid"
            ) from exc
        return cls(width=width, height=height, owner=owner,
                   distance_from_spine=distance)

    @property
    def size(self) -> int:
        return self.width * self.height

    def cell(self, x: int, y: int) -> Cell:
        """Return the cell at ``(x, y)``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Cell ({x}, {y}) outside {self.width}x{self.height} grid")
        distance = int(self.distance_from_spine[y, x])
        return Cell(
            position=(x, y),
            owner=int(self.owner[y, x]),
            distance_from_spine=None if distance == UNSET_DISTANCE else distance,
        )

    def is_fully_assigned(self) -> bool:
        return bool(np.all(self.owner >= 0))


def generate_regions(width: int, height: int, density: int,
                     prng: AleaPRNG) -> List[Region]:
    """
    Create ``density`` regions with random centres and colours.

    Centres are drawn uniformly from ``[0, width) x [0, height)``. Coincident
    centres are kept; regions sharing a centre will not get distinct cells.

    Args:
        width: Grid width
        height: Grid height
        density: Number of regions to create
        prng: Random source, consumed in region order (x, y, colour)

    Returns:
        Regions with ids 0..density-1

    Raises:
        InvalidArgument: If density is negative or a dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise InvalidArgument(
            f"Grid dimensions must be positive, got {width}x{height}"
        )
    if density < 0:
        raise InvalidArgument(f"Density must not be negative, got {density}")

    regions = []
    for region_id in range(density):
        centre = (prng.randint(0, width), prng.randint(0, height))
        regions.append(Region(id=region_id, centre=centre, colour=prng.colour()))

    logger.info("Random points created", regions=len(regions))
    return regions


def region_centres(regions: List[Region]) -> np.ndarray:
    """Region centres as an ``(n, 2)`` array of ``[x, y]``."""
    if not regions:
        return np.empty((0, 2), dtype=np.int64)
    return np.array([region.centre for region in regions], dtype=np.int64)
