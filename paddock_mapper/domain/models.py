"""
Domain models for farm boundaries, paddocks and livestock data.

These models represent the core domain entities and should be independent
of any infrastructure concerns (storage, rendering, etc.). Their JSON shape
follows GeoJSON feature collections so they can be handed to a map renderer
with ``model_dump(by_alias=True)``.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field


Coordinate = Tuple[float, float]
"""A (longitude, latitude) pair."""

Ring = List[Coordinate]
"""Ordered coordinates outlining a polygon, closed by repeating the first vertex."""


class LivestockType(str, Enum):
    CATTLE = "cattle"
    SHEEP = "sheep"
    GOATS = "goats"
    HORSES = "horses"
    OTHER = "other"


class LivestockStatus(str, Enum):
    HEALTHY = "healthy"
    ATTENTION = "attention"
    QUARANTINE = "quarantine"
    BREEDING = "breeding"
    MEDICATION = "medication"


class AppState(str, Enum):
    """Screen states of a farm mapping session."""
    INITIAL = "initial"
    DRAWING_FARM = "drawing-farm"
    FARM_COMPLETED = "farm-completed"
    PADDOCK_MODE = "paddock-mode"
    DRAWING_PADDOCK = "drawing-paddock"
    LIVESTOCK_MODE = "livestock-mode"
    HEATMAP_MODE = "heatmap-mode"
    EDITING = "editing"


class BottomMenuMode(str, Enum):
    PADDOCK = "paddock"
    LIVESTOCK = "livestock"
    HEATMAP = "heatmap"


class DrawingMode(str, Enum):
    FARM = "farm"
    PADDOCK = "paddock"


# ============================================================
# Polygon features
# ============================================================

class FarmProperties(BaseModel):
    """Properties of a farm boundary feature."""
    id: str
    name: str
    created: str = Field(description="ISO-8601 creation timestamp")
    type: Literal["farm"] = "farm"


class PaddockProperties(BaseModel):
    """Properties of a paddock feature."""
    id: str
    name: str
    created: str = Field(description="ISO-8601 creation timestamp")
    type: Literal["paddock"] = "paddock"
    parent_id: Optional[str] = Field(
        default=None,
        alias="parentId",
        description="Identifier of the farm boundary the paddock was drawn in"
    )
    purpose: Optional[str] = None
    capacity: Optional[int] = None
    notes: Optional[str] = None
    initials: Optional[str] = Field(
        default=None,
        description="Name initials shown as the paddock label"
    )
    
    class Config:
        populate_by_name = True


FeatureProperties = Annotated[
    Union[FarmProperties, PaddockProperties],
    Field(discriminator="type"),
]


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[Ring]


class PolygonFeature(BaseModel):
    """A named farm or paddock shape owning exactly one ring."""
    type: Literal["Feature"] = "Feature"
    properties: FeatureProperties
    geometry: PolygonGeometry
    
    @property
    def id(self) -> str:
        return self.properties.id
    
    @property
    def name(self) -> str:
        return self.properties.name
    
    @property
    def is_farm(self) -> bool:
        return self.properties.type == "farm"
    
    @property
    def is_paddock(self) -> bool:
        return self.properties.type == "paddock"
    
    @property
    def ring(self) -> Ring:
        """The outer ring of the polygon (empty if the geometry has none)."""
        if not self.geometry.coordinates:
            return []
        return self.geometry.coordinates[0]


class PolygonCollection(BaseModel):
    """Ordered polygon features; insertion order is display order."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[PolygonFeature] = Field(default_factory=list)


# ============================================================
# Point features
# ============================================================

class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: Coordinate


class PointFeature(BaseModel):
    type: Literal["Feature"] = "Feature"
    properties: Dict[str, Any] = Field(default_factory=dict)
    geometry: PointGeometry


class PointCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[PointFeature] = Field(default_factory=list)


# ============================================================
# Livestock and heatmap data
# ============================================================

class LivestockRecord(BaseModel):
    """Livestock held in one paddock."""
    paddock_id: str = Field(alias="paddockId")
    count: int = Field(ge=0, description="Head count")
    type: LivestockType
    status: LivestockStatus
    last_updated: datetime = Field(alias="lastUpdated")
    
    class Config:
        populate_by_name = True


class LivestockAnnotation(BaseModel):
    """Display projection of a livestock record at its paddock centroid."""
    id: str
    paddock_id: str = Field(alias="paddockId")
    coordinates: Coordinate
    count: int
    type: LivestockType
    status: LivestockStatus
    
    class Config:
        populate_by_name = True


class HeatmapPoint(BaseModel):
    """A single sample of the livestock density field."""
    id: str
    coordinates: Coordinate
    value: int = Field(ge=0, le=100, description="Density in percent")
    category: str = "livestock-density"


# ============================================================
# Drawing session data
# ============================================================

class DrawingPoint(BaseModel):
    """A vertex of the shape currently being drawn."""
    id: str
    coordinates: Coordinate


class PaddockInfo(BaseModel):
    """Form data entered when saving a paddock."""
    name: str
    purpose: str = "Grazing"
    capacity: str = ""
    notes: str = ""
