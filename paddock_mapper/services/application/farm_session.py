"""
Application service: headless farm mapping session.

Owns the drawing state machine and the polygon collection, and re-derives
livestock records, annotations and the density heatmap after every change.
Follows the application layer pattern - geometry and derivation live in the
domain layer, persistence in the infrastructure layer.

States::

    initial -> drawing-farm -> paddock-mode <-> {drawing-paddock,
                                                 livestock-mode,
                                                 heatmap-mode} <-> editing
"""
from datetime import datetime, timezone
from typing import Optional
import logging
import re
import time
import uuid

import numpy as np

from paddock_mapper.constants import DEFAULT_PADDOCK_PURPOSE
from paddock_mapper.domain.models import (
    AppState,
    BottomMenuMode,
    Coordinate,
    DrawingMode,
    DrawingPoint,
    FarmProperties,
    HeatmapPoint,
    LivestockAnnotation,
    LivestockRecord,
    PaddockInfo,
    PaddockProperties,
    PointCollection,
    PointFeature,
    PointGeometry,
    PolygonCollection,
    PolygonFeature,
    PolygonGeometry,
)
from paddock_mapper.infrastructure.storage import FarmStateStore, StorageError
from paddock_mapper.services.domain.annotations import (
    add_initials_to_polygons,
    create_livestock_annotations,
    find_feature,
    generate_mock_livestock_data,
    get_farm_boundaries,
    get_paddocks,
    get_paddocks_for_farm,
    get_polygon_vertices,
    to_livestock_collection,
)
from paddock_mapper.services.domain.heatmap_generator import (
    HeatmapGenerator,
    to_heatmap_collection,
)
from paddock_mapper.utils.geometry import (
    create_closed_ring,
    is_paddock_within_farm,
    is_point_in_polygon,
)

logger = logging.getLogger(__name__)

MIN_POLYGON_POINTS = 3
FARM_BOUNDARY_NAME = "Farm Boundary"

DRAWING_STATES = (AppState.DRAWING_FARM, AppState.DRAWING_PADDOCK)

MENU_STATES = {
    BottomMenuMode.PADDOCK: AppState.PADDOCK_MODE,
    BottomMenuMode.LIVESTOCK: AppState.LIVESTOCK_MODE,
    BottomMenuMode.HEATMAP: AppState.HEATMAP_MODE,
}


class FarmSessionError(Exception):
    """Base class for rejected session actions."""
    pass


class DrawingError(FarmSessionError):
    """The shape being drawn cannot be completed."""
    pass


class PaddockOutsideFarmError(FarmSessionError):
    """A paddock vertex lies outside the selected farm boundary."""
    pass


class InvalidStateError(FarmSessionError):
    """The action is not available in the current state."""
    pass


def parse_capacity(text: str) -> Optional[int]:
    """
    Read the head capacity typed into the paddock form.
    
    Leading whitespace and a sign are allowed and only the leading digits
    count, so "12 head" is 12.
    
    Returns:
        The capacity, or None when the text does not start with a number
    """
    match = re.match(r"\s*([+-]?\d+)", text)
    if match is None:
        return None
    return int(match.group(1))


class FarmMapSession:
    """
    Application service for one farm mapping session.
    
    Every mutation goes through a method here; the derived livestock,
    annotation and heatmap data are rebuilt from the polygon collection
    whenever it changes, never patched.
    """
    
    def __init__(
        self,
        store: Optional[FarmStateStore] = None,
        heatmap_generator: Optional[HeatmapGenerator] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the session with dependencies.
        
        Args:
            store: Persistence for auto-saving; None keeps the session in memory
            heatmap_generator: Density heatmap builder
            rng: Random generator for mock livestock data
        """
        self.store = store
        self.rng = rng or np.random.default_rng()
        self.heatmap_generator = heatmap_generator or HeatmapGenerator(rng=self.rng)
        
        self.app_state = AppState.INITIAL
        self.is_edit_mode = False
        self.drawing_mode = DrawingMode.FARM
        self.selected_polygon_id: Optional[str] = None
        self.selected_farm_id: Optional[str] = None
        self.bottom_menu_mode: Optional[BottomMenuMode] = None
        self.current_polygon: list[DrawingPoint] = []
        self.completed_polygons = PolygonCollection()
        self.pending_paddock: Optional[PaddockInfo] = None
        
        self.livestock_data: list[LivestockRecord] = []
        self.livestock_annotations: list[LivestockAnnotation] = []
        self.heatmap_data: list[HeatmapPoint] = []
    
    # ============================================================
    # Persistence
    # ============================================================
    
    def load(self) -> None:
        """Restore the session from the store and rebuild derived data."""
        if self.store is None:
            return
        
        data = self.store.load_all()
        self.completed_polygons = data.completed_polygons
        self.selected_farm_id = data.selected_farm_id
        self.app_state = data.app_state
        self.bottom_menu_mode = data.bottom_menu_mode
        self.is_edit_mode = self.app_state == AppState.EDITING
        
        logger.info(f"Restored {len(self.completed_polygons.features)} polygons, "
                    f"state={self.app_state.value}")
        self._refresh_derived()
    
    def _autosave(self, method: str, *args) -> None:
        """Call a store save method; failures are logged, not raised."""
        if self.store is None:
            return
        try:
            getattr(self.store, method)(*args)
        except StorageError as e:
            logger.error(f"Auto-save ({method}) failed: {e}")

    def _set_app_state(self, state: AppState) -> None:
        if state != self.app_state:
            logger.info(f"App state: {self.app_state.value} -> {state.value}")
        self.app_state = state
        self._autosave("save_app_state", state)

    def _set_selected_farm(self, farm_id: Optional[str]) -> None:
        self.selected_farm_id = farm_id
        self._autosave("save_selected_farm_id", farm_id)

    def _set_bottom_menu_mode(self, mode: Optional[BottomMenuMode]) -> None:
        self.bottom_menu_mode = mode
        self._autosave("save_bottom_menu_mode", mode)

    def _set_polygons(self, polygons: PolygonCollection) -> None:
        self.completed_polygons = polygons
        if polygons.features:
            self._autosave("save_completed_polygons", polygons)
        self._refresh_derived()
    
    def _refresh_derived(self) -> None:
        """Regenerate livestock, annotations and heatmap from the polygons."""
        paddocks = get_paddocks(self.completed_polygons)
        if paddocks:
            self.livestock_data = generate_mock_livestock_data(self.completed_polygons, self.rng)
            logger.info(f"Generated livestock data for {len(paddocks)} paddocks")
        else:
            self.livestock_data = []
        
        self.livestock_annotations = create_livestock_annotations(
            self.completed_polygons, self.livestock_data
        )
        
        if get_farm_boundaries(self.completed_polygons) and self.livestock_data:
            self.heatmap_data = self.heatmap_generator.generate(
                self.completed_polygons, self.livestock_data
            )
            logger.info(f"Generated {len(self.heatmap_data)} livestock density heatmap points")
        else:
            self.heatmap_data = []
    
    # ============================================================
    # Drawing
    # ============================================================
    
    def _start_drawing(self, state: AppState, mode: DrawingMode) -> None:
        self._set_app_state(state)
        self.drawing_mode = mode
        self.selected_polygon_id = None
        self.current_polygon = []
    
    def start_drawing_farm(self) -> None:
        self._start_drawing(AppState.DRAWING_FARM, DrawingMode.FARM)
    
    def start_drawing_paddock(self) -> None:
        self._start_drawing(AppState.DRAWING_PADDOCK, DrawingMode.PADDOCK)
    
    # The floating "+" button does the same as the control panel entry
    add_paddock = start_drawing_paddock
    
    def handle_map_press(self, longitude: float, latitude: float) -> Optional[DrawingPoint]:
        """
        React to a tap on the map.
        
        While drawing, the tap adds a vertex. In edit mode it selects the
        first polygon containing the tap, or clears the selection.
        
        Returns:
            The added drawing point, if any
        """
        if self.app_state in DRAWING_STATES:
            point = DrawingPoint(
                id=f"point_{uuid.uuid4().hex}",
                coordinates=(longitude, latitude),
            )
            self.current_polygon.append(point)
            return point
        
        if self.is_edit_mode:
            tapped = next(
                (
                    feature for feature in self.completed_polygons.features
                    if is_point_in_polygon((longitude, latitude), feature.ring)
                ),
                None,
            )
            self.selected_polygon_id = tapped.id if tapped else None
        
        return None
    
    def move_drawing_point(self, point_id: str, coordinates: Coordinate) -> None:
        """Move a vertex of the shape being drawn."""
        self.current_polygon = [
            point.model_copy(update={"coordinates": coordinates}) if point.id == point_id else point
            for point in self.current_polygon
        ]
    
    def cancel_drawing(self) -> None:
        if self.app_state == AppState.DRAWING_FARM:
            self._set_app_state(AppState.INITIAL)
        elif self.app_state == AppState.DRAWING_PADDOCK:
            self._set_app_state(AppState.PADDOCK_MODE)
        self.current_polygon = []
    
    def _drawn_coordinates(self, label: str) -> list[Coordinate]:
        if len(self.current_polygon) < MIN_POLYGON_POINTS:
            raise DrawingError(
                f"A {label} needs at least {MIN_POLYGON_POINTS} points. Please add more points."
            )
        return [point.coordinates for point in self.current_polygon]
    
    def _new_feature_id(self, prefix: str) -> str:
        timestamp = int(time.time() * 1000)
        while find_feature(self.completed_polygons, f"{prefix}_{timestamp}") is not None:
            timestamp += 1
        return f"{prefix}_{timestamp}"
    
    def _append_feature(self, feature: PolygonFeature) -> None:
        self._set_polygons(self.completed_polygons.model_copy(
            update={"features": [*self.completed_polygons.features, feature]}
        ))
    
    def complete_farm(self) -> PolygonFeature:
        """
        Store the drawn shape as a farm boundary and select it.
        
        Raises:
            InvalidStateError: If no farm is being drawn
            DrawingError: If fewer than 3 points were placed
        """
        if self.app_state != AppState.DRAWING_FARM:
            raise InvalidStateError("No farm boundary is being drawn")
        
        coords = self._drawn_coordinates("farm boundary")
        feature = PolygonFeature(
            properties=FarmProperties(
                id=self._new_feature_id("farm"),
                name=FARM_BOUNDARY_NAME,
                created=datetime.now(timezone.utc).isoformat(),
            ),
            geometry=PolygonGeometry(coordinates=[create_closed_ring(coords)]),
        )
        
        self._append_feature(feature)
        self._set_selected_farm(feature.id)
        self.current_polygon = []
        self._set_app_state(AppState.PADDOCK_MODE)
        self._set_bottom_menu_mode(BottomMenuMode.PADDOCK)
        
        logger.info(f"Farm boundary {feature.id} completed with {len(coords)} points")
        return feature
    
    def complete_paddock(self) -> PaddockInfo:
        """
        Validate the drawn paddock and prepare its info form.
        
        Only vertices are checked against the selected farm boundary.
        
        Returns:
            Default form values ("Paddock <n>", Grazing)
            
        Raises:
            InvalidStateError: If no paddock is being drawn
            DrawingError: If fewer than 3 points were placed
            PaddockOutsideFarmError: If a vertex is outside the selected farm
        """
        if self.app_state != AppState.DRAWING_PADDOCK:
            raise InvalidStateError("No paddock is being drawn")
        
        coords = self._drawn_coordinates("paddock")
        
        if self.selected_farm_id:
            farm = find_feature(self.completed_polygons, self.selected_farm_id)
            if farm is not None and not is_paddock_within_farm(coords, farm.ring):
                raise PaddockOutsideFarmError(
                    "The paddock must be drawn completely within the farm boundary."
                )
        
        paddock_count = len(get_paddocks_for_farm(self.completed_polygons, self.selected_farm_id or ""))
        self.pending_paddock = PaddockInfo(
            name=f"Paddock {paddock_count + 1}",
            purpose=DEFAULT_PADDOCK_PURPOSE,
        )
        return self.pending_paddock
    
    def save_paddock(self, info: PaddockInfo) -> PolygonFeature:
        """
        Store the drawn paddock with the submitted form data.
        
        Raises:
            InvalidStateError: If complete_paddock has not accepted the shape
        """
        if self.pending_paddock is None or self.app_state != AppState.DRAWING_PADDOCK:
            raise InvalidStateError("There is no validated paddock to save")
        
        coords = self._drawn_coordinates("paddock")
        capacity = parse_capacity(info.capacity)
        
        feature = PolygonFeature(
            properties=PaddockProperties(
                id=self._new_feature_id("paddock"),
                name=info.name.strip(),
                created=datetime.now(timezone.utc).isoformat(),
                parent_id=self.selected_farm_id or None,
                purpose=info.purpose,
                capacity=capacity,
                notes=info.notes.strip() or None,
            ),
            geometry=PolygonGeometry(coordinates=[create_closed_ring(coords)]),
        )
        
        self._append_feature(feature)
        self.current_polygon = []
        self.pending_paddock = None
        self._set_app_state(AppState.PADDOCK_MODE)
        
        logger.info(f"{feature.name} created with {len(coords)} points")
        return feature
    
    def cancel_paddock_info(self) -> None:
        """Close the info form; the drawn paddock stays in progress."""
        self.pending_paddock = None
    
    # ============================================================
    # Editing
    # ============================================================
    
    def enter_edit_mode(self) -> None:
        self._set_app_state(AppState.EDITING)
        self.is_edit_mode = True
    
    def exit_edit_mode(self) -> None:
        self._set_app_state(AppState.PADDOCK_MODE)
        self.is_edit_mode = False
        self.selected_polygon_id = None
    
    def drag_vertex(self, vertex_index: int, coordinates: Coordinate) -> None:
        """
        Move a vertex of the selected polygon.
        
        The closing point is kept equal to the first vertex. Does nothing
        when no polygon is selected.
        
        Args:
            vertex_index: Index into the polygon's open vertex list
            coordinates: New (longitude, latitude) of the vertex
            
        Raises:
            DrawingError: If vertex_index is not a vertex of the polygon
        """
        if not self.selected_polygon_id:
            return
        
        features = []
        for feature in self.completed_polygons.features:
            if feature.id == self.selected_polygon_id:
                ring = list(feature.ring)
                if not 0 <= vertex_index < len(ring) - 1:
                    raise DrawingError(
                        f"{feature.name} has no vertex {vertex_index}"
                    )
                ring[vertex_index] = (coordinates[0], coordinates[1])
                ring[-1] = ring[0]
                feature = feature.model_copy(update={
                    "geometry": PolygonGeometry(coordinates=[ring]),
                })
            features.append(feature)
        
        self._set_polygons(self.completed_polygons.model_copy(update={"features": features}))
    
    # ============================================================
    # Menus
    # ============================================================
    
    def select_bottom_menu(self, mode: BottomMenuMode) -> None:
        self._set_bottom_menu_mode(mode)
        self._set_app_state(MENU_STATES[mode])
    
    def clear_all(self) -> None:
        """Forget every shape and selection and wipe the store."""
        self.completed_polygons = PolygonCollection()
        self.current_polygon = []
        self.pending_paddock = None
        self.is_edit_mode = False
        self.selected_polygon_id = None
        self.selected_farm_id = None
        self.bottom_menu_mode = None
        self.app_state = AppState.INITIAL
        self.livestock_data = []
        self.livestock_annotations = []
        self.heatmap_data = []
        
        self._autosave("clear_all_data")
        logger.info("Cleared all farm data")
    
    # ============================================================
    # Renderable layers
    # ============================================================
    
    def polygons_with_initials(self) -> PolygonCollection:
        return add_initials_to_polygons(self.completed_polygons)
    
    def livestock_points(self) -> PointCollection:
        return to_livestock_collection(self.livestock_annotations)
    
    def heatmap_points(self) -> PointCollection:
        return to_heatmap_collection(self.heatmap_data)
    
    def selected_polygon_vertices(self) -> list[Coordinate]:
        return get_polygon_vertices(self.completed_polygons, self.selected_polygon_id or "")
    
    def current_drawing_points(self) -> PointCollection:
        return PointCollection(features=[
            PointFeature(
                properties={"index": index, "pointId": point.id},
                geometry=PointGeometry(coordinates=point.coordinates),
            )
            for index, point in enumerate(self.current_polygon)
        ])
    
    def current_drawing_polygon(self) -> Optional[dict]:
        """
        The in-progress shape as a GeoJSON polygon feature.
        
        The ring is closed once it has at least 3 points. Returns None
        when nothing has been drawn.
        """
        if not self.current_polygon:
            return None
        
        coords = [point.coordinates for point in self.current_polygon]
        if len(coords) >= MIN_POLYGON_POINTS:
            coords = create_closed_ring(coords)
        
        return {
            "type": "Feature",
            "properties": {"isDrawing": True, "drawingMode": self.drawing_mode.value},
            "geometry": {"type": "Polygon", "coordinates": [coords]},
        }
