"""
Unit tests for the geometry kernel.

Tests cover:
- Ray-casting containment
- Paddock-in-farm validation (vertex-only and strict)
- Ring closing
- Centroids and bounding boxes
"""
import pytest

from paddock_mapper.utils.geometry import (
    bounding_box,
    centroid,
    create_closed_ring,
    distance,
    is_paddock_strictly_within_farm,
    is_paddock_within_farm,
    is_point_in_polygon,
    open_ring_vertices,
)


# ============================================================
# Point-in-Polygon Tests
# ============================================================

class TestPointInPolygon:
    """Tests for the even-odd containment test."""
    
    def test_point_inside_square(self, square_ring):
        assert is_point_in_polygon((5, 5), square_ring) is True
    
    def test_point_outside_square(self, square_ring):
        assert is_point_in_polygon((15, 5), square_ring) is False
    
    def test_closed_ring_gives_same_result(self, square_ring):
        closed = create_closed_ring(square_ring)
        
        assert is_point_in_polygon((5, 5), closed) is True
        assert is_point_in_polygon((15, 5), closed) is False
    
    def test_degenerate_ring_is_never_inside(self):
        """Rings with fewer than 3 points contain nothing."""
        ring = [(0, 0), (10, 10)]
        
        for point in [(5, 5), (0, 0), (10, 10), (-1, 3)]:
            assert is_point_in_polygon(point, ring) is False
    
    def test_empty_ring(self):
        assert is_point_in_polygon((0, 0), []) is False
    
    def test_point_in_concave_notch_is_outside(self, concave_farm_ring):
        assert is_point_in_polygon((5, 8), concave_farm_ring) is False
        assert is_point_in_polygon((1, 8), concave_farm_ring) is True
        assert is_point_in_polygon((9, 8), concave_farm_ring) is True
    
    def test_accepts_lists(self):
        ring = [[0, 0], [0, 10], [10, 10], [10, 0]]
        
        assert is_point_in_polygon([5, 5], ring) is True
    
    def test_horizontal_edge_at_point_latitude(self, square_ring):
        """Points level with a horizontal edge but beside the ring stay outside."""
        assert is_point_in_polygon((-5, 10), square_ring) is False
        assert is_point_in_polygon((-5, 0), square_ring) is False


# ============================================================
# Paddock Validation Tests
# ============================================================

class TestPaddockWithinFarm:
    """Tests for paddock containment validation."""
    
    def test_paddock_inside_farm(self, square_ring):
        paddock = [(2, 2), (2, 4), (4, 4), (4, 2)]
        
        assert is_paddock_within_farm(paddock, square_ring) is True
    
    def test_one_vertex_outside_fails(self, square_ring):
        paddock = [(2, 2), (2, 4), (12, 4), (4, 2)]
        
        assert is_paddock_within_farm(paddock, square_ring) is False
    
    def test_edge_crossing_concave_farm_passes(self, concave_farm_ring):
        """Only vertices are checked, so an edge spanning the notch is accepted."""
        paddock = [(1, 8), (9, 8), (9, 9), (1, 9)]
        
        assert is_paddock_within_farm(paddock, concave_farm_ring) is True
    
    def test_strict_check_rejects_edge_crossing(self, concave_farm_ring):
        paddock = [(1, 8), (9, 8), (9, 9), (1, 9)]
        
        assert is_paddock_strictly_within_farm(paddock, concave_farm_ring) is False
    
    def test_strict_check_accepts_contained_paddock(self, square_ring):
        paddock = create_closed_ring([(2, 2), (2, 4), (4, 4), (4, 2)])
        
        assert is_paddock_strictly_within_farm(paddock, square_ring) is True
    
    def test_strict_check_degenerate_rings(self, square_ring):
        assert is_paddock_strictly_within_farm([(1, 1), (2, 2)], square_ring) is False
        assert is_paddock_strictly_within_farm([(1, 1), (2, 2), (2, 1)], [(0, 0)]) is False


# ============================================================
# Ring Helper Tests
# ============================================================

class TestRingHelpers:
    """Tests for ring closing and vertex extraction."""
    
    def test_create_closed_ring(self):
        p0, p1, p2 = (0.0, 0.0), (1.0, 0.0), (1.0, 1.0)
        
        assert create_closed_ring([p0, p1, p2]) == [p0, p1, p2, p0]
    
    def test_closing_twice_duplicates_closing_point(self):
        p0, p1, p2 = (0.0, 0.0), (1.0, 0.0), (1.0, 1.0)
        
        twice = create_closed_ring(create_closed_ring([p0, p1, p2]))
        
        assert twice == [p0, p1, p2, p0, p0]
    
    def test_close_empty_ring(self):
        assert create_closed_ring([]) == []
    
    def test_does_not_mutate_input(self):
        coords = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]
        
        create_closed_ring(coords)
        
        assert len(coords) == 3
    
    def test_open_ring_vertices(self):
        ring = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)]
        
        assert open_ring_vertices(ring) == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]


# ============================================================
# Centroid Tests
# ============================================================

class TestCentroid:
    """Tests for the vertex-mean centroid."""
    
    def test_closing_vertex_is_counted(self):
        """Mean over all 5 points, including the repeated closing vertex."""
        ring = [(0, 0), (0, 10), (10, 10), (10, 0), (0, 0)]
        
        assert centroid(ring) == (4.0, 4.0)
    
    def test_open_ring(self, square_ring):
        assert centroid(square_ring) == (5.0, 5.0)
    
    def test_empty_ring(self):
        assert centroid([]) == (0.0, 0.0)
    
    def test_skips_short_coordinates(self):
        assert centroid([(2, 4), (6,), (4, 8)]) == (3.0, 6.0)
        assert centroid([(1,)]) == (0.0, 0.0)


class TestBoundingBox:
    """Tests for bounding boxes and distances."""
    
    def test_bounding_box(self, farm_ring):
        assert bounding_box(farm_ring) == (-99.91, 41.49, -99.89, 41.51)
    
    def test_empty_bounding_box(self):
        assert bounding_box([]) == (0.0, 0.0, 0.0, 0.0)
    
    def test_distance(self):
        assert distance((0, 0), (3, 4)) == pytest.approx(5.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
