"""Tests for MegaRegion spine construction."""

import numpy as np
import pytest
from py_regionmap.core.alea_prng import AleaPRNG
from py_regionmap.core.clusters import Cluster, build_clusters
from py_regionmap.core.errors import InvalidArgument
from py_regionmap.core.regions import Region, generate_regions
from py_regionmap.core.spines import build_spine, build_spines, sample_segment


def make_cluster(*centres):
    members = [Region(id=i, centre=c, colour=(0.5, 0.5, 0.5, 1.0))
               for i, c in enumerate(centres)]
    return Cluster(id=0, colour=(1.0, 0.0, 0.0, 1.0), member_regions=members)


def distance_to_segment(point, start, end):
    p, a, b = (np.asarray(v, dtype=float) for v in (point, start, end))
    ab = b - a
    t = np.clip(np.dot(p - a, ab) / np.dot(ab, ab), 0, 1)
    return np.linalg.norm(p - (a + t * ab))


class TestSampleSegment:
    """Test straight line sampling."""

    def test_even_samples(self):
        """Test evenly spaced samples ending at the target."""
        assert sample_segment((0, 0), (10, 0), 5) == [(2, 0), (4, 0), (6, 0), (8, 0), (10, 0)]

    def test_diagonal(self):
        """Test a diagonal segment."""
        assert sample_segment((0, 0), (4, 4), 4) == [(1, 1), (2, 2), (3, 3), (4, 4)]

    def test_rounds_half_to_even(self):
        """Test rounding of half-way samples."""
        assert sample_segment((0, 0), (3, 0), 2) == [(2, 0), (3, 0)]
        assert sample_segment((0, 0), (1, 0), 2) == [(0, 0), (1, 0)]

    def test_needs_a_sample(self):
        """Test that zero samples is rejected."""
        with pytest.raises(InvalidArgument):
            sample_segment((0, 0), (1, 1), 0)


class TestBuildSpine:
    """Test greedy spine chaining."""

    def test_two_members(self):
        """Test that a pair links in both directions."""
        cluster = make_cluster((0, 0), (10, 0))
        spine = build_spine(cluster, line_point_density=5)

        assert spine == [(2, 0), (4, 0), (6, 0), (8, 0), (10, 0),
                         (8, 0), (6, 0), (4, 0), (2, 0), (0, 0)]
        assert all(r.spine_linked for r in cluster.member_regions)

    def test_greedy_can_leave_member_unlinked(self):
        """Test that a late member finds every mate already used."""
        cluster = make_cluster((0, 0), (10, 0), (30, 0))
        build_spine(cluster, line_point_density=2)

        # 0 -> 1, 1 -> 0, then 2 has no unused destination
        assert cluster.spine_points == [(5, 0), (10, 0), (5, 0), (0, 0)]
        assert not cluster.member_regions[2].spine_linked

    def test_first_nearest_wins(self):
        """Test that equal distances pick the first member."""
        cluster = make_cluster((0, 0), (10, 0), (0, 10))
        build_spine(cluster, line_point_density=1)

        assert cluster.spine_points[0] == (10, 0)

    def test_solid_line(self):
        """Test one sample per unit of distance."""
        cluster = make_cluster((0, 0), (0, 7))
        build_spine(cluster, solid_line=True)

        assert cluster.spine_points[:7] == [(0, y) for y in range(1, 8)]
        assert len(cluster.spine_points) == 14

    def test_single_member(self):
        """Test that a lone member has no spine."""
        cluster = make_cluster((4, 4))
        assert build_spine(cluster) == []

    def test_coincident_centres_skipped(self):
        """Test that segments of zero length are not sampled."""
        cluster = make_cluster((5, 5), (5, 5), (20, 5))
        build_spine(cluster, line_point_density=3)

        # 0 and 1 only see each other at distance zero; 2 links back to 0
        assert cluster.spine_points == [(15, 5), (10, 5), (5, 5)]
        assert cluster.member_regions[0].spine_linked
        assert not cluster.member_regions[1].spine_linked

    def test_invalid_density(self):
        """Test that density below one is rejected."""
        with pytest.raises(InvalidArgument):
            build_spine(make_cluster((0, 0), (5, 5)), line_point_density=0)

    def test_points_on_member_segments(self):
        """Test that every sample lies on a segment between member centres."""
        regions = generate_regions(150, 150, 60, AleaPRNG("segments"))
        clusters = build_clusters(regions, (5, 35), AleaPRNG("segments"))
        build_spines(clusters, line_point_density=7)

        assert clusters
        for cluster in clusters:
            assert cluster.spine_points
            centres = [r.centre for r in cluster.member_regions]
            for point in cluster.spine_points:
                nearest = min(
                    distance_to_segment(point, a, b)
                    for a in centres for b in centres if a != b
                )
                assert nearest <= np.sqrt(0.5) + 1e-9
