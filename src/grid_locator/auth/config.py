"""Configuration management for Grid Locator.

This module provides centralized configuration using Pydantic Settings.
Values come from environment variables with automatic ``.env`` loading from
the repository root: layer sources, per-layer field names, the geometry role
of the substation and feeder layers, and the feeder assignment tolerance.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional, ClassVar
import os


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes
    ----------
    APP_NAME : str
        Application name identifier.
    API_TOKEN : str, optional
        Bearer token for API authentication.
    FEEDER_ASSIGN_TOLERANCE_MI : float
        A point within this many miles of a feeder line counts as assigned.
    SUBSTATION_GEOMETRY : {"polygon", "point"}
        Whether substation zones are areas or point locations.
    FEEDER_GEOMETRY : {"polygon", "line"}
        Whether feeders are service areas or line routes.
    GRIDS_SOURCE, GRID_OOT_SOURCE, SUBSTATIONS_SOURCE, FEEDERS_SOURCE, HUTS_SOURCE : str, optional
        File path or http(s) URL of each layer's GeoJSON. Unset layers are absent.
    GRID_CODE_FIELD, SUBSTATION_NAME_FIELD, HUT_ID_FIELD, HUT_SUBSTATION_FIELD : str
        Property names read from the respective layers.
    FEEDER_CODE_FIELD, FEEDER_SUBSTATION_FIELD : str
        Preferred feeder property names, tried before the alias lists.
    FEEDER_CODE_ALIASES, FEEDER_SUBSTATION_ALIASES : list[str]
        Alternative spellings tried, in order, when loading the feeder layer.
    NEIGHBOR_GRID_COUNT : int
        How many grids the nearest-by-centroid helper returns.
    """
    APP_NAME: str = "grid-locator"
    API_TOKEN: Optional[str] = None

    FEEDER_ASSIGN_TOLERANCE_MI: float = 0.25
    SUBSTATION_GEOMETRY: Literal["polygon", "point"] = "polygon"
    FEEDER_GEOMETRY: Literal["polygon", "line"] = "polygon"

    GRIDS_SOURCE: Optional[str] = "data/Grids.geojson"
    GRID_OOT_SOURCE: Optional[str] = None
    SUBSTATIONS_SOURCE: Optional[str] = "data/Zones.geojson"
    FEEDERS_SOURCE: Optional[str] = "data/Feeders.geojson"
    HUTS_SOURCE: Optional[str] = "data/Huts.geojson"

    GRID_CODE_FIELD: str = "Number_"
    SUBSTATION_NAME_FIELD: str = "Substation"
    HUT_ID_FIELD: str = "stationID"
    HUT_SUBSTATION_FIELD: str = "Substation"
    FEEDER_CODE_FIELD: str = "Feeder_Code"
    FEEDER_SUBSTATION_FIELD: str = "Substation"
    FEEDER_CODE_ALIASES: List[str] = [
        "Feeder", "FEEDER", "FeederID", "Feeder_Code", "feeder_code", "FeederName", "Feeder Code",
    ]
    FEEDER_SUBSTATION_ALIASES: List[str] = ["Substation", "substation", "SUBSTATION"]

    NEIGHBOR_GRID_COUNT: int = 3

    env_path: ClassVar[str] = os.path.join(os.path.dirname(os.path.dirname(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__))))), ".env")
    model_config = SettingsConfigDict(env_file=env_path, extra="ignore")


settings = Settings()
