"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Persistence
    storage_path: str = Field(
        default="farm-management-storage.json",
        description="Path of the JSON file backing the key-value store"
    )
    
    # Heatmap Generation Parameters
    heatmap_grid_size: int = Field(
        default=25,
        description="Number of grid cells per axis across the farm bounding box"
    )
    heatmap_influence_threshold: float = Field(
        default=0.01,
        description="Total paddock influence below which a sample counts as uninfluenced"
    )
    heatmap_noise_max: int = Field(
        default=5,
        description="Upper bound of the random background value for uninfluenced samples"
    )
    
    # Mock Livestock Parameters
    mock_livestock_min_count: int = Field(
        default=20,
        description="Smallest generated head count per paddock"
    )
    mock_livestock_max_count: int = Field(
        default=620,
        description="Largest generated head count per paddock (inclusive)"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    
    # Application Settings
    app_name: str = Field(
        default="Paddock Mapper",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    
    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
