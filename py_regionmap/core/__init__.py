"""
Core region map generation functionality.
"""

from .alea_prng import AleaPRNG
from .errors import RegionMapError, InvalidArgument, PreconditionViolation, ResourceExhaustion
from .regions import Cell, Grid, Region, generate_regions
from .voronoi_grid import allocate_cells, point_distance
from .clusters import Cluster, build_clusters
from .spines import build_spine, build_spines, sample_segment
from .distance_field import compute_distance_field, compute_distance_fields
from .compositor import DisplayMode, composite
from .pipeline import GenerationConfig, GenerationResult, generate

__all__ = ['AleaPRNG', 'RegionMapError', 'InvalidArgument', 'PreconditionViolation',
           'ResourceExhaustion', 'Cell', 'Grid', 'Region', 'generate_regions',
           'allocate_cells', 'point_distance', 'Cluster', 'build_clusters',
           'build_spine', 'build_spines', 'sample_segment',
           'compute_distance_field', 'compute_distance_fields',
           'DisplayMode', 'composite',
           'GenerationConfig', 'GenerationResult', 'generate']
