"""Tests for spine distance fields."""

import numpy as np
import pytest
from py_regionmap.core.alea_prng import AleaPRNG
from py_regionmap.core.clusters import Cluster, build_clusters
from py_regionmap.core.distance_field import (
    cluster_cells, compute_distance_field, compute_distance_fields
)
from py_regionmap.core.errors import PreconditionViolation, ResourceExhaustion
from py_regionmap.core.regions import UNSET_DISTANCE, Grid, Region, generate_regions
from py_regionmap.core.spines import build_spines
from py_regionmap.core.voronoi_grid import allocate_cells, point_distance


@pytest.fixture
def three_regions():
    """A 12x4 grid split between three regions."""
    regions = [Region(id=i, centre=c, colour=(0.2, 0.4, 0.6, 1.0))
               for i, c in enumerate([(0, 0), (5, 0), (11, 3)])]
    grid = allocate_cells(regions, Grid.allocate(12, 4))
    return regions, grid


class TestComputeDistanceField:
    """Test per-cell distance from the spine."""

    def test_distances_match_brute_force(self, three_regions):
        """Test every member cell against the closest spine point."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0),
                          member_regions=regions[:2],
                          spine_points=[(0, 0), (3, 0), (5, 0)])

        max_distance = compute_distance_field(cluster, grid)

        for x, y in cluster_cells(cluster):
            expected = min(point_distance((x, y), p) for p in cluster.spine_points)
            assert grid.cell(x, y).distance_from_spine == expected
        assert max_distance == cluster.max_distance
        assert max_distance == max(
            grid.cell(x, y).distance_from_spine for x, y in cluster_cells(cluster)
        )

    def test_non_members_untouched(self, three_regions):
        """Test that cells outside the cluster stay unset."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0),
                          member_regions=regions[:2], spine_points=[(2, 0)])
        compute_distance_field(cluster, grid)

        for x, y in regions[2].owned_cells:
            assert grid.distance_from_spine[y, x] == UNSET_DISTANCE

    def test_empty_spine_is_skipped(self, three_regions):
        """Test the fail-safe for clusters without a spine."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0), member_regions=regions[:2])

        assert compute_distance_field(cluster, grid) is None
        assert cluster.max_distance is None
        assert np.all(grid.distance_from_spine == UNSET_DISTANCE)

    def test_empty_spine_strict(self, three_regions):
        """Test that strict mode reports the missing spine."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0), member_regions=regions[:2])

        with pytest.raises(PreconditionViolation):
            compute_distance_field(cluster, grid, strict=True)

    def test_chunked(self, three_regions, monkeypatch):
        """Test that chunking cells gives the same distances."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0),
                          member_regions=regions, spine_points=[(1, 1), (9, 2)])
        compute_distance_field(cluster, grid)
        expected = grid.distance_from_spine.copy()

        grid.distance_from_spine[:] = UNSET_DISTANCE
        monkeypatch.setattr("py_regionmap.core.distance_field.MAX_CHUNK_ENTRIES", 3)
        compute_distance_field(cluster, grid)

        np.testing.assert_array_equal(grid.distance_from_spine, expected)

    def test_all_clusters(self):
        """Test distances for every cluster of a generated map."""
        regions = generate_regions(80, 60, 30, AleaPRNG("field"))
        grid = allocate_cells(regions, Grid.allocate(80, 60))
        clusters = build_clusters(regions, (5, 30), AleaPRNG("field"))
        build_spines(clusters)
        compute_distance_fields(clusters, grid)

        for region in regions:
            for x, y in region.owned_cells:
                cell = grid.cell(x, y)
                if region.part_of_cluster:
                    assert cell.distance_from_spine is not None
                else:
                    assert cell.distance_from_spine is None

    def test_memory_error_surfaces(self, three_regions, monkeypatch):
        """Test that a failed distance chunk becomes ResourceExhaustion."""
        regions, grid = three_regions
        cluster = Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0),
                          member_regions=regions[:2], spine_points=[(2, 0)])

        def out_of_memory(*args, **kwargs):
            raise MemoryError()

        monkeypatch.setattr("py_regionmap.core.distance_field.truncated_distances",
                            out_of_memory)
        with pytest.raises(ResourceExhaustion):
            compute_distance_field(cluster, grid)
