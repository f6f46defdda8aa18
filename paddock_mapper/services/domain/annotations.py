"""
Domain service: paddock labels and livestock annotations.

Derives everything the livestock layers show from a polygon collection:
- Farm/paddock filtering
- Paddock name initials
- Mock livestock records (stand-in for a telemetry feed)
- Livestock annotations at paddock centroids
"""
from datetime import datetime, timezone
from typing import Optional
import logging

import numpy as np

from paddock_mapper.config import settings
from paddock_mapper.constants import (
    DEFAULT_LIVESTOCK_ICON,
    DEFAULT_STATUS_COLOR,
    LIVESTOCK_ICONS,
    STATUS_COLORS,
)
from paddock_mapper.domain.models import (
    LivestockAnnotation,
    LivestockRecord,
    LivestockStatus,
    LivestockType,
    PointCollection,
    PointFeature,
    PointGeometry,
    PolygonCollection,
    PolygonFeature,
)
from paddock_mapper.utils.geometry import centroid, open_ring_vertices

logger = logging.getLogger(__name__)

# Random generation deliberately draws from a subset of each enumeration
MOCK_LIVESTOCK_TYPES = [LivestockType.CATTLE, LivestockType.SHEEP]
MOCK_LIVESTOCK_STATUSES = [
    LivestockStatus.HEALTHY,
    LivestockStatus.ATTENTION,
    LivestockStatus.BREEDING,
    LivestockStatus.MEDICATION,
]


# ============================================================
# Feature filters
# ============================================================

def get_farm_boundaries(polygons: PolygonCollection) -> list[PolygonFeature]:
    """Farm boundary features in collection order."""
    return [feature for feature in polygons.features if feature.is_farm]


def get_paddocks(polygons: PolygonCollection) -> list[PolygonFeature]:
    """Paddock features in collection order, whatever farm they belong to."""
    return [feature for feature in polygons.features if feature.is_paddock]


def get_paddocks_for_farm(polygons: PolygonCollection, farm_id: str) -> list[PolygonFeature]:
    """
    Get the paddocks drawn inside a specific farm.
    
    Args:
        polygons: Polygon collection
        farm_id: Identifier of the farm boundary
        
    Returns:
        Paddock features whose parent_id equals farm_id
    """
    return [
        feature for feature in polygons.features
        if feature.is_paddock and feature.properties.parent_id == farm_id
    ]


def find_feature(polygons: PolygonCollection, feature_id: str) -> Optional[PolygonFeature]:
    """First feature with the given id, or None."""
    for feature in polygons.features:
        if feature.id == feature_id:
            return feature
    return None


def get_polygon_vertices(polygons: PolygonCollection, feature_id: str) -> list[tuple[float, float]]:
    """
    Get the editable vertices of a stored polygon.
    
    Args:
        polygons: Polygon collection
        feature_id: Identifier of the polygon
        
    Returns:
        Ring vertices without the closing point, or an empty list if no
        feature has that id
    """
    feature = find_feature(polygons, feature_id)
    if feature is None:
        return []
    return open_ring_vertices(feature.ring)


# ============================================================
# Paddock labels
# ============================================================

def derive_initials(name: str) -> str:
    """
    Extract initials from a paddock name for map display.
    
    "East Paddock" -> "E P", "7 Field" -> "F". Tokens whose upper-cased
    first character is not a letter A-Z are dropped.
    """
    if not name or not name.strip():
        return ""
    
    letters = [word[0].upper() for word in name.split()]
    return " ".join(letter for letter in letters if "A" <= letter <= "Z")


def add_initials_to_polygons(polygons: PolygonCollection) -> PolygonCollection:
    """
    Copy the collection with initials set on every named paddock.
    
    The input collection is left untouched.
    """
    features = []
    for feature in polygons.features:
        if feature.is_paddock and feature.name:
            properties = feature.properties.model_copy(
                update={"initials": derive_initials(feature.name)}
            )
            feature = feature.model_copy(update={"properties": properties})
        features.append(feature)
    
    return polygons.model_copy(update={"features": features})


# ============================================================
# Livestock data
# ============================================================

def generate_mock_livestock_data(
    polygons: PolygonCollection,
    rng: Optional[np.random.Generator] = None,
) -> list[LivestockRecord]:
    """
    Generate a random livestock record for every paddock.
    
    Counts are uniform over the configured inclusive range (20-620 by
    default), types are cattle or sheep and statuses exclude quarantine.
    The data is always regenerated in full.
    
    Args:
        polygons: Polygon collection
        rng: Random generator; a fresh unseeded one is used when omitted
        
    Returns:
        One record per paddock, in paddock order
    """
    rng = rng or np.random.default_rng()
    timestamp = datetime.now(timezone.utc)
    
    records = []
    for paddock in get_paddocks(polygons):
        count = int(rng.integers(
            settings.mock_livestock_min_count,
            settings.mock_livestock_max_count + 1,
        ))
        livestock_type = MOCK_LIVESTOCK_TYPES[int(rng.integers(len(MOCK_LIVESTOCK_TYPES)))]
        status = MOCK_LIVESTOCK_STATUSES[int(rng.integers(len(MOCK_LIVESTOCK_STATUSES)))]
        
        records.append(LivestockRecord(
            paddock_id=paddock.id,
            count=count,
            type=livestock_type,
            status=status,
            last_updated=timestamp,
        ))
    
    logger.debug(f"Generated livestock data for {len(records)} paddocks")
    return records


def create_livestock_annotations(
    polygons: PolygonCollection,
    livestock_data: list[LivestockRecord],
) -> list[LivestockAnnotation]:
    """
    Create one livestock annotation per paddock.
    
    Paddocks without a record get a zero-count healthy cattle annotation,
    so no paddock is ever left out.
    
    Args:
        polygons: Polygon collection
        livestock_data: Livestock records keyed by paddock id
        
    Returns:
        Annotations positioned at each paddock's centroid
    """
    by_paddock = {record.paddock_id: record for record in livestock_data}
    
    annotations = []
    for paddock in get_paddocks(polygons):
        record = by_paddock.get(paddock.id)
        position = centroid(paddock.ring)
        
        if record is not None:
            annotations.append(LivestockAnnotation(
                id=f"livestock_{paddock.id}",
                paddock_id=paddock.id,
                coordinates=position,
                count=record.count,
                type=record.type,
                status=record.status,
            ))
        else:
            annotations.append(LivestockAnnotation(
                id=f"livestock_{paddock.id}",
                paddock_id=paddock.id,
                coordinates=position,
                count=0,
                type=LivestockType.CATTLE,
                status=LivestockStatus.HEALTHY,
            ))
    
    return annotations


def to_livestock_collection(annotations: list[LivestockAnnotation]) -> PointCollection:
    """
    Wrap annotations as point features for the livestock symbol layer.
    
    Counts are rendered as text, so they are stored as strings.
    """
    features = []
    for annotation in annotations:
        features.append(PointFeature(
            properties={
                "id": annotation.id,
                "count": str(annotation.count),
                "type": annotation.type.value,
                "status": annotation.status.value,
                "iconImage": LIVESTOCK_ICONS.get(annotation.type, DEFAULT_LIVESTOCK_ICON),
                "statusColor": STATUS_COLORS.get(annotation.status, DEFAULT_STATUS_COLOR),
            },
            geometry=PointGeometry(coordinates=annotation.coordinates),
        ))
    
    return PointCollection(features=features)
