"""
Domain service: synthetic livestock density heatmap.

Samples a regular grid over the first farm boundary and derives a density
value for every sample inside the farm:
- Samples inside a paddock take that paddock's stocking level, shaped by
  proximity to the paddock centroid and a small sinusoidal variation
- Samples outside all paddocks take the mean stocking level of stocked
  paddocks, weighted by an exponential distance falloff
- Samples no paddock reaches get low random background noise

This is a visualization aid, not a physical density estimate. Distances are
measured directly in degrees.
"""
from dataclasses import dataclass, field
from typing import Optional
import logging
import math

import numpy as np

from paddock_mapper.config import settings
from paddock_mapper.constants import HEATMAP_CATEGORY, HEATMAP_LEGEND_BANDS
from paddock_mapper.domain.models import (
    HeatmapPoint,
    LivestockRecord,
    PointCollection,
    PointFeature,
    PointGeometry,
    PolygonCollection,
    PolygonFeature,
)
from paddock_mapper.services.domain.annotations import get_farm_boundaries, get_paddocks
from paddock_mapper.utils.geometry import bounding_box, centroid, distance, is_point_in_polygon

logger = logging.getLogger(__name__)


@dataclass
class HeatmapConfig:
    """Configuration for heatmap generation."""
    
    # Sampling
    grid_size: int = field(default_factory=lambda: settings.heatmap_grid_size)
    """Grid cells per axis; (grid_size + 1)^2 samples are taken"""
    
    # Stocking level
    head_per_full_density: float = 10.0
    """Head count that maps to 100% density"""
    
    # Samples inside a paddock
    proximity_floor: float = 0.7
    """Share of the stocking level kept at any distance from the centroid"""
    
    proximity_decay: float = 200.0
    """Exponential decay rate of the centroid proximity boost (per degree)"""
    
    variation_frequency: float = 0.5
    """Grid-index frequency of the natural variation term"""
    
    variation_amplitude: float = 5.0
    """Amplitude of the natural variation term, in percent"""
    
    # Samples outside all paddocks
    influence_decay: float = 100.0
    """Exponential falloff rate of paddock influence (per degree)"""
    
    influence_threshold: float = field(default_factory=lambda: settings.heatmap_influence_threshold)
    """Total influence below which a sample counts as uninfluenced"""
    
    # Grazing pattern added to every influenced sample
    grazing_frequency_x: float = 0.3
    grazing_frequency_y: float = 0.2
    grazing_amplitude: float = 3.0
    
    # Background
    noise_max: int = field(default_factory=lambda: settings.heatmap_noise_max)
    """Largest random value given to uninfluenced samples"""


@dataclass
class _PaddockSource:
    """A paddock's contribution to the density field."""
    feature: PolygonFeature
    centroid: tuple[float, float]
    count: int
    density: float


class HeatmapGenerator:
    """
    Domain service that builds the livestock density field for a farm.
    
    Holds no state between calls besides its configuration; the random
    generator is only used for background noise.
    """
    
    def __init__(
        self,
        config: Optional[HeatmapConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the generator.
        
        Args:
            config: Generation parameters (defaults from settings)
            rng: Random generator for background noise
        """
        self.config = config or HeatmapConfig()
        self.rng = rng or np.random.default_rng()
    
    def generate(
        self,
        polygons: PolygonCollection,
        livestock_data: list[LivestockRecord],
    ) -> list[HeatmapPoint]:
        """
        Generate heatmap samples for the first farm in the collection.
        
        Args:
            polygons: Polygon collection with at least one farm
            livestock_data: Livestock records for the paddocks
            
        Returns:
            Heatmap points for every grid sample inside the farm, or an empty
            list when there is no farm or no livestock data
        """
        farms = get_farm_boundaries(polygons)
        if not farms or not livestock_data:
            return []
        
        farm_ring = farms[0].ring
        sources = self._build_sources(polygons, livestock_data)
        
        grid_size = self.config.grid_size
        min_lng, min_lat, max_lng, max_lat = bounding_box(farm_ring)
        lngs = np.linspace(min_lng, max_lng, grid_size + 1)
        lats = np.linspace(min_lat, max_lat, grid_size + 1)
        
        points = []
        for i in range(grid_size + 1):
            for j in range(grid_size + 1):
                sample = (float(lngs[i]), float(lats[j]))
                
                if not is_point_in_polygon(sample, farm_ring):
                    continue
                
                points.append(HeatmapPoint(
                    id=f"heatmap_{i}_{j}",
                    coordinates=sample,
                    value=self._sample_value(sample, i, j, sources),
                    category=HEATMAP_CATEGORY,
                ))
        
        logger.debug(f"Generated {len(points)} heatmap points from "
                     f"{(grid_size + 1) ** 2} grid samples")
        return points
    
    def _build_sources(
        self,
        polygons: PolygonCollection,
        livestock_data: list[LivestockRecord],
    ) -> list[_PaddockSource]:
        """Pair every paddock with its head count and stocking density."""
        counts = {record.paddock_id: record.count for record in livestock_data}
        
        sources = []
        for paddock in get_paddocks(polygons):
            count = counts.get(paddock.id, 0)
            sources.append(_PaddockSource(
                feature=paddock,
                centroid=centroid(paddock.ring),
                count=count,
                density=self._stocking_density(count),
            ))
        return sources
    
    def _stocking_density(self, count: int) -> float:
        """Head count scaled so head_per_full_density head is 100%."""
        density = count / self.config.head_per_full_density * 100
        return min(100.0, max(0.0, density))
    
    def _sample_value(
        self,
        sample: tuple[float, float],
        i: int,
        j: int,
        sources: list[_PaddockSource],
    ) -> int:
        """
        Calculate the integer density of one grid sample.
        
        Args:
            sample: Sample coordinate
            i: Longitude grid index
            j: Latitude grid index
            sources: Paddock sources in collection order
            
        Returns:
            Density in [0, 100]
        """
        cfg = self.config
        density = 0.0
        total_influence = 0.0
        
        containing = next(
            (s for s in sources if is_point_in_polygon(sample, s.feature.ring)),
            None,
        )
        
        if containing is not None:
            proximity = cfg.proximity_floor + (1 - cfg.proximity_floor) * math.exp(
                -distance(sample, containing.centroid) * cfg.proximity_decay
            )
            variation = (
                math.sin(i * cfg.variation_frequency)
                * math.cos(j * cfg.variation_frequency)
                * cfg.variation_amplitude
            )
            density = containing.density * proximity + variation
            total_influence = 1.0
        else:
            for source in sources:
                if source.count <= 0:
                    continue
                weight = math.exp(-distance(sample, source.centroid) * cfg.influence_decay)
                density += source.density * weight
                total_influence += weight
            
            if total_influence < cfg.influence_threshold:
                total_influence = 0.0
        
        if total_influence == 0:
            return int(self.rng.integers(0, cfg.noise_max + 1))
        
        # Influence-weighted mean of the paddock densities
        value = density / total_influence
        value += (
            math.sin(i * cfg.grazing_frequency_x + j * cfg.grazing_frequency_y)
            * cfg.grazing_amplitude
        )
        value = min(100.0, max(0.0, value))
        return int(math.floor(value + 0.5))


def generate_heatmap_data(
    polygons: PolygonCollection,
    livestock_data: list[LivestockRecord],
    rng: Optional[np.random.Generator] = None,
    config: Optional[HeatmapConfig] = None,
) -> list[HeatmapPoint]:
    """
    Generate the livestock density heatmap for the first farm.
    
    Args:
        polygons: Polygon collection
        livestock_data: Livestock records for the paddocks
        rng: Random generator for background noise
        config: Generation parameters
        
    Returns:
        Heatmap points, empty when no farm or no livestock data exists
    """
    return HeatmapGenerator(config=config, rng=rng).generate(polygons, livestock_data)


def to_heatmap_collection(points: list[HeatmapPoint]) -> PointCollection:
    """
    Wrap heatmap points as point features for the density layer.
    
    Each feature carries value, category and intensity (value / 100).
    """
    return PointCollection(features=[
        PointFeature(
            properties={
                "id": point.id,
                "value": point.value,
                "category": point.category,
                "intensity": point.value / 100,
            },
            geometry=PointGeometry(coordinates=point.coordinates),
        )
        for point in points
    ])


def density_band(value: float) -> str:
    """Legend label of the band a density value falls in."""
    for lower_bound, label, _ in HEATMAP_LEGEND_BANDS:
        if value >= lower_bound:
            return label
    return HEATMAP_LEGEND_BANDS[-1][1]
