"""
Geometry kernel for farm and paddock rings.

Provides utilities for:
- Ray-casting point-in-polygon tests
- Paddock-in-farm containment validation
- Ring closing and vertex extraction
- Simple centroids and bounding boxes

Coordinates are (longitude, latitude) pairs treated as planar x/y values.
None of these functions raise for degenerate input.
"""
from typing import Sequence
import logging

from shapely.geometry import Polygon

logger = logging.getLogger(__name__)


def is_point_in_polygon(
    point: Sequence[float],
    polygon_coords: Sequence[Sequence[float]]
) -> bool:
    """
    Check if a point is inside a polygon using the even-odd rule.
    
    A horizontal ray is cast from the point; every edge (including the
    wrap-around edge from the last vertex to the first) that straddles the
    point's latitude and lies to its right toggles the result. Edges that are
    horizontal at the point's latitude never straddle it.
    
    Args:
        point: (x, y) coordinate
        polygon_coords: Ring vertices, closed or open
        
    Returns:
        True if point is inside polygon, False otherwise (always False for
        rings with fewer than 3 points)
    """
    if len(polygon_coords) < 3:
        return False
    
    x, y = point[0], point[1]
    inside = False
    
    j = len(polygon_coords) - 1
    for i in range(len(polygon_coords)):
        xi, yi = polygon_coords[i][0], polygon_coords[i][1]
        xj, yj = polygon_coords[j][0], polygon_coords[j][1]
        
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    
    return inside


def is_paddock_within_farm(
    paddock_coords: Sequence[Sequence[float]],
    farm_coords: Sequence[Sequence[float]]
) -> bool:
    """
    Check that every paddock vertex lies inside the farm boundary.
    
    Only vertices are tested: a paddock edge that leaves a concave farm
    between two inside vertices still passes. Use
    is_paddock_strictly_within_farm for area containment.
    
    Args:
        paddock_coords: Paddock ring vertices
        farm_coords: Farm ring vertices
        
    Returns:
        True if all paddock vertices are inside the farm ring
    """
    for coord in paddock_coords:
        if not is_point_in_polygon(coord, farm_coords):
            return False
    return True


def is_paddock_strictly_within_farm(
    paddock_coords: Sequence[Sequence[float]],
    farm_coords: Sequence[Sequence[float]]
) -> bool:
    """
    Check that the whole paddock area is covered by the farm polygon.
    
    Unlike is_paddock_within_farm, this detects paddock edges that cross
    the farm boundary between two inside vertices.
    
    Args:
        paddock_coords: Paddock ring vertices
        farm_coords: Farm ring vertices
        
    Returns:
        True if the farm polygon covers the paddock polygon
    """
    if len(paddock_coords) < 3 or len(farm_coords) < 3:
        return False
    
    paddock = Polygon([(c[0], c[1]) for c in paddock_coords])
    farm = Polygon([(c[0], c[1]) for c in farm_coords])
    
    if not paddock.is_valid or not farm.is_valid:
        logger.debug("Strict containment requested for a self-intersecting ring")
        return False
    
    return farm.covers(paddock)


def create_closed_ring(coordinates: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """
    Close an open ring by repeating its first coordinate at the end.
    
    Not idempotent: closing an already closed ring duplicates the closing
    point again.
    
    Args:
        coordinates: Open list of (x, y) coordinates
        
    Returns:
        New list with the first coordinate appended
    """
    ring = [(c[0], c[1]) for c in coordinates]
    if not ring:
        return ring
    return ring + [ring[0]]


def open_ring_vertices(ring: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """
    Return the ring without its closing point.
    
    Args:
        ring: Closed ring
        
    Returns:
        Editable vertices of the ring
    """
    return [(c[0], c[1]) for c in ring[:-1]]


def centroid(coordinates: Sequence[Sequence[float]]) -> tuple[float, float]:
    """
    Calculate the arithmetic mean of a ring's vertices.
    
    The closing vertex of a closed ring is counted like any other vertex,
    so this is not an area-weighted centroid.
    
    Args:
        coordinates: Ring vertices
        
    Returns:
        Mean (x, y), or (0, 0) when there are no usable coordinates
    """
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    
    for coord in coordinates:
        if len(coord) >= 2:
            sum_x += coord[0]
            sum_y += coord[1]
            count += 1
    
    if count == 0:
        return (0.0, 0.0)
    
    return (sum_x / count, sum_y / count)


def bounding_box(coordinates: Sequence[Sequence[float]]) -> tuple[float, float, float, float]:
    """
    Calculate the axis-aligned bounding box of a ring.
    
    Args:
        coordinates: Ring vertices
        
    Returns:
        (min_x, min_y, max_x, max_y), or all zeros for an empty ring
    """
    if not coordinates:
        return (0.0, 0.0, 0.0, 0.0)
    
    xs = [c[0] for c in coordinates]
    ys = [c[1] for c in coordinates]
    return (min(xs), min(ys), max(xs), max(ys))


def distance(
    point1: Sequence[float],
    point2: Sequence[float]
) -> float:
    """Euclidean distance in raw coordinate units (degrees, unprojected)."""
    dx = point1[0] - point2[0]
    dy = point1[1] - point2[1]
    return (dx * dx + dy * dy) ** 0.5
