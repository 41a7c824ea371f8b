"""
One-shot region map generation.

``generate`` runs every phase in order (seed points, cell allocation,
MegaRegions, spines, spine distances, colouring), each starting only once
the previous one has finished. The same config always yields the same
buffer.
"""

import numpy as np
import structlog
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Callable, List, Optional, Tuple, Union

from ..config import settings
from .alea_prng import AleaPRNG
from .clusters import Cluster, build_clusters, validate_threshold
from .compositor import DisplayMode, composite
from .distance_field import compute_distance_fields
from .errors import InvalidArgument, RegionMapError
from .regions import Grid, Region, generate_regions
from .spines import build_spines
from .voronoi_grid import allocate_cells

logger = structlog.get_logger()

ProgressCallback = Callable[[str], None]


class GenerationConfig(BaseModel):
    """Options for a single generation run.

    Invalid values raise ``InvalidArgument``.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(default_factory=lambda: settings.default_map_width, gt=0,
                       description="Grid width in cells")
    height: int = Field(default_factory=lambda: settings.default_map_height, gt=0,
                        description="Grid height in cells")
    density: int = Field(10, ge=0, description="Number of regions")

    use_clusters: bool = Field(False, description="Group regions into MegaRegions")
    cluster_threshold: Tuple[int, int] = Field(
        (10, 20), description="Exclusive (min, max) centre distance for clustering"
    )
    line_point_density: int = Field(20, ge=1, description="Samples per spine segment")
    solid_line: bool = Field(False, description="One spine sample per unit of distance")

    display_mode: DisplayMode = Field(DisplayMode.REGION, description="Colouring mode")
    show_markers: bool = Field(False, description="Mark region centres")
    marker_size: int = Field(0, ge=0, description="Marker arm length")
    show_spine_lines: bool = Field(False, description="Draw MegaRegion spines")

    seed: Union[str, int] = Field("default", description="Random seed")
    workers: int = Field(default_factory=lambda: settings.default_workers, ge=1,
                         description="Threads used to allocate cells")

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

    @field_validator("width")
    @classmethod
    def _check_width(cls, value: int) -> int:
        if value > settings.max_map_width:
            raise ValueError(f"width {value} exceeds maximum {settings.max_map_width}")
        return value

    @field_validator("height")
    @classmethod
    def _check_height(cls, value: int) -> int:
        if value > settings.max_map_height:
            raise ValueError(f"height {value} exceeds maximum {settings.max_map_height}")
        return value

    @field_validator("cluster_threshold")
    @classmethod
    def _check_threshold(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        return validate_threshold(value)


@dataclass
class GenerationResult:
    """Finished buffer plus the state it was drawn from."""

    buffer: np.ndarray
    grid: Grid
    regions: List[Region]
    clusters: List[Cluster]
    config: GenerationConfig
    phases: List[str] = field(default_factory=list)


def generate(config: GenerationConfig,
             progress: Optional[ProgressCallback] = None) -> GenerationResult:
    """
    Generate a region map.

    Args:
        config: Generation options
        progress: Optional callable receiving each phase label as it starts

    Returns:
        The finished result

    Raises:
        InvalidArgument: Bad dimensions or density
        PreconditionViolation: Zero regions requested
        ResourceExhaustion: Grid too large for memory
    """
    phases: List[str] = []

    def report(label: str) -> None:
        phases.append(label)
        logger.info(label)
        if progress is not None:
            progress(label)

    logger.info("Generating region map", width=config.width, height=config.height,
                density=config.density, seed=config.seed,
                use_clusters=config.use_clusters,
                display_mode=config.display_mode.value)

    try:
        prng = AleaPRNG(config.seed)

        report("Creating region points.")
        regions = generate_regions(config.width, config.height, config.density, prng)

        report("Allocating region nodes.")
        grid = Grid.allocate(config.width, config.height)
        allocate_cells(regions, grid, workers=config.workers)

        clusters: List[Cluster] = []
        if config.use_clusters:
            report("Creating MegaRegions.")
            clusters = build_clusters(regions, config.cluster_threshold, prng)

            report("Building MegaRegion spines.")
            build_spines(clusters, config.line_point_density, config.solid_line)

            report("Calculating spine distances.")
            compute_distance_fields(clusters, grid)

        mode = config.display_mode
        if mode.shows_clusters and not config.use_clusters:
            logger.warning("MegaRegions disabled, colouring by region",
                           display_mode=mode.value)
            mode = DisplayMode.REGION

        buffer = composite(
            grid, regions, clusters, mode,
            show_markers=config.show_markers,
            marker_size=config.marker_size,
            show_spine_lines=config.show_spine_lines and config.use_clusters,
            report=report,
        )
    except RegionMapError as exc:
        logger.error("Region map generation failed", error=str(exc),
                     error_type=type(exc).__name__, phase=phases[-1] if phases else None)
        raise

    logger.info("Region map generated", regions=len(regions), clusters=len(clusters),
                prng_calls=prng.call_count)
    return GenerationResult(buffer=buffer, grid=grid, regions=regions,
                            clusters=clusters, config=config, phases=phases)
