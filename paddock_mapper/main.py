"""
Application entry point.

Configures logging and builds a farm mapping session restored from local
storage, ready to be driven by a map screen.
"""
import logging
from typing import Optional

import numpy as np

from paddock_mapper.config import settings
from paddock_mapper.infrastructure.storage import FarmStateStore, KeyValueStore
from paddock_mapper.services.application.farm_session import FarmMapSession
from paddock_mapper.services.domain.heatmap_generator import HeatmapGenerator

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging.
    
    Args:
        level: Logging level name (defaults to settings.log_level)
    """
    level = level or settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_session(
    storage_path: Optional[str] = None,
    seed: Optional[int] = None,
) -> FarmMapSession:
    """
    Build a session wired to file storage and restore the saved state.
    
    Args:
        storage_path: JSON storage file (defaults to settings.storage_path)
        seed: Seed for mock livestock data and heatmap noise
        
    Returns:
        Loaded FarmMapSession
    """
    rng = np.random.default_rng(seed)
    store = FarmStateStore(KeyValueStore(storage_path))
    
    session = FarmMapSession(
        store=store,
        heatmap_generator=HeatmapGenerator(rng=rng),
        rng=rng,
    )
    
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage: {store.store.path}")
    session.load()
    return session
