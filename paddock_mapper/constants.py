"""
Map and styling constants.

Centralizes the values the map layers and the forms share: paddock
purposes, livestock marker styling and the density legend bands.
"""
from paddock_mapper.domain.models import LivestockStatus, LivestockType


# Options offered for a paddock's purpose
PADDOCK_PURPOSES = [
    "Grazing",
    "Feed Area",
    "Water Area",
    "Shelter",
    "Quarantine",
    "Breeding",
    "Medical",
    "Other",
]

DEFAULT_PADDOCK_PURPOSE = PADDOCK_PURPOSES[0]


# Marker colour per livestock status; anything unlisted falls back to blue
STATUS_COLORS = {
    LivestockStatus.HEALTHY: "#4CAF50",
    LivestockStatus.ATTENTION: "#FF9800",
    LivestockStatus.QUARANTINE: "#F44336",
    LivestockStatus.BREEDING: "#9C27B0",
}
DEFAULT_STATUS_COLOR = "#2196F3"

# Symbol icon per livestock type; every other type shares the sheep icon
CATTLE_ICON = "livestock-cattle"
DEFAULT_LIVESTOCK_ICON = "livestock-sheep"
LIVESTOCK_ICONS = {
    LivestockType.CATTLE: CATTLE_ICON,
}

HEATMAP_CATEGORY = "livestock-density"

# Legend bands as (lower bound, label, colour), highest first
HEATMAP_LEGEND_BANDS = [
    (80, "Very High (80-100%)", "rgba(255, 0, 0, 1)"),
    (60, "High (60-80%)", "rgba(255, 150, 0, 0.9)"),
    (40, "Medium (40-60%)", "rgba(255, 255, 0, 0.8)"),
    (20, "Low-Medium (20-40%)", "rgba(50, 255, 50, 0.8)"),
    (5, "Low (5-20%)", "rgba(0, 200, 255, 0.7)"),
    (0, "Very Low (0-5%)", "rgba(0, 100, 255, 0.6)"),
]
