"""
Infrastructure layer: local key-value persistence.

A small JSON-file-backed string store plus typed save/load helpers for the
farm mapping session. Writes overwrite the whole document (last write wins);
there are no consistency guarantees beyond that.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
import json
import logging

from pydantic import BaseModel, ValidationError

from paddock_mapper.config import settings
from paddock_mapper.domain.models import AppState, BottomMenuMode, PolygonCollection

logger = logging.getLogger(__name__)


class StorageKeys:
    """Keys of the persisted session values."""
    
    COMPLETED_POLYGONS = "completedPolygons"
    SELECTED_FARM_ID = "selectedFarmId"
    APP_STATE = "appState"
    BOTTOM_MENU_MODE = "bottomMenuMode"
    LAST_SAVED = "lastSaved"


NEVER_SAVED = "Never"


class StorageError(Exception):
    """Raised when the backing file cannot be read or written."""
    pass


class StorageData(BaseModel):
    """Everything restored when a session starts."""
    completed_polygons: PolygonCollection
    selected_farm_id: Optional[str] = None
    app_state: AppState = AppState.INITIAL
    bottom_menu_mode: Optional[BottomMenuMode] = None
    last_saved: str = NEVER_SAVED


class StorageInfo(BaseModel):
    """Summary of what the store currently holds."""
    total_keys: int
    keys: List[str]
    last_saved: str
    has_data: bool


class KeyValueStore:
    """
    String key-value store persisted as one JSON document.
    
    The file is re-read on every access so several store instances on the
    same path see each other's writes.
    """
    
    def __init__(self, path: Optional[str] = None):
        """
        Initialize the store.
        
        Args:
            path: JSON file location (defaults to settings.storage_path)
        """
        self.path = Path(path or settings.storage_path)
    
    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected content in {self.path}")
        return data
    
    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
    
    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
    
    def get_string(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None
    
    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
    
    def get_all_keys(self) -> List[str]:
        return list(self._read().keys())
    
    def clear_all(self) -> None:
        self._write({})


class FarmStateStore:
    """
    Typed persistence for a farm mapping session.
    
    Save methods raise StorageError on failure. Load methods never raise:
    unreadable or invalid values are logged and replaced by defaults.
    """
    
    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store or KeyValueStore()
    
    # ---------------- save ----------------
    
    def save_completed_polygons(self, polygons: PolygonCollection) -> None:
        self.store.set(
            StorageKeys.COMPLETED_POLYGONS,
            polygons.model_dump_json(by_alias=True, exclude_none=True),
        )
        self.store.set(StorageKeys.LAST_SAVED, datetime.now(timezone.utc).isoformat())
        logger.debug(f"Saved {len(polygons.features)} polygons to storage")
    
    def save_selected_farm_id(self, farm_id: Optional[str]) -> None:
        if farm_id:
            self.store.set(StorageKeys.SELECTED_FARM_ID, farm_id)
        else:
            self.store.delete(StorageKeys.SELECTED_FARM_ID)
        logger.debug(f"Saved selected farm ID: {farm_id}")
    
    def save_app_state(self, state: AppState) -> None:
        self.store.set(StorageKeys.APP_STATE, state.value)
        logger.debug(f"Saved app state: {state.value}")
    
    def save_bottom_menu_mode(self, mode: Optional[BottomMenuMode]) -> None:
        if mode:
            self.store.set(StorageKeys.BOTTOM_MENU_MODE, mode.value)
        else:
            self.store.delete(StorageKeys.BOTTOM_MENU_MODE)
        logger.debug(f"Saved bottom menu mode: {mode.value if mode else None}")
    
    # ---------------- load ----------------
    
    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get_string(key)
        except StorageError as e:
            logger.error(f"Error loading {key}: {e}")
            return None
    
    def load_completed_polygons(self) -> PolygonCollection:
        data = self._get(StorageKeys.COMPLETED_POLYGONS)
        if data:
            try:
                polygons = PolygonCollection.model_validate_json(data)
                logger.debug(f"Loaded {len(polygons.features)} polygons from storage")
                return polygons
            except ValidationError as e:
                logger.error(f"Error loading polygons: {e}")
        
        return PolygonCollection()
    
    def load_selected_farm_id(self) -> Optional[str]:
        return self._get(StorageKeys.SELECTED_FARM_ID) or None
    
    def load_app_state(self) -> AppState:
        value = self._get(StorageKeys.APP_STATE)
        if value:
            try:
                return AppState(value)
            except ValueError:
                logger.error(f"Ignoring unknown stored app state: {value!r}")
        return AppState.INITIAL
    
    def load_bottom_menu_mode(self) -> Optional[BottomMenuMode]:
        value = self._get(StorageKeys.BOTTOM_MENU_MODE)
        if value:
            try:
                return BottomMenuMode(value)
            except ValueError:
                logger.error(f"Ignoring unknown stored bottom menu mode: {value!r}")
        return None
    
    def load_all(self) -> StorageData:
        """Load every persisted session value, falling back to defaults."""
        data = StorageData(
            completed_polygons=self.load_completed_polygons(),
            selected_farm_id=self.load_selected_farm_id(),
            app_state=self.load_app_state(),
            bottom_menu_mode=self.load_bottom_menu_mode(),
            last_saved=self._get(StorageKeys.LAST_SAVED) or NEVER_SAVED,
        )
        logger.info(f"Loaded stored session (last saved: {data.last_saved})")
        return data
    
    # ---------------- maintenance ----------------
    
    def clear_all_data(self) -> None:
        self.store.clear_all()
        logger.info("Cleared all storage data")
    
    def get_storage_info(self) -> StorageInfo:
        try:
            keys = self.store.get_all_keys()
        except StorageError as e:
            logger.error(f"Error getting storage info: {e}")
            keys = []
        
        return StorageInfo(
            total_keys=len(keys),
            keys=keys,
            last_saved=self._get(StorageKeys.LAST_SAVED) or NEVER_SAVED,
            has_data=len(keys) > 0,
        )
