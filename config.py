"""
config.py

Environment-driven settings for the safe-routing core.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Directions + nearest-road services
    osrm_base_url: str = Field(default="https://router.project-osrm.org", alias="OSRM_BASE_URL")
    osrm_profile: str = Field(default="foot", alias="OSRM_PROFILE")

    # OpenRouteService (polygon avoidance); empty key disables the strategy
    ors_api_key: str = Field(default="", alias="ORS_API_KEY")
    ors_profile: str = Field(default="foot-walking", alias="ORS_PROFILE")
    ors_timeout_s: float = Field(default=10.0, gt=0, alias="ORS_TIMEOUT_S")

    # Offline road graph
    road_graph_path: str = Field(default="osm_roads.json", alias="ROAD_GRAPH_PATH")
    node_precision: int = Field(default=6, ge=1, le=9, alias="NODE_PRECISION")

    # Online orchestrator
    snap_timeout_s: float = Field(default=0.8, gt=0, alias="SNAP_TIMEOUT_S")
    route_timeout_s: float = Field(default=6.0, gt=0, alias="ROUTE_TIMEOUT_S")
    fast_path_timeout_s: float = Field(default=1.2, gt=0, alias="FAST_PATH_TIMEOUT_S")
    path_buffer_m: float = Field(default=40.0, ge=0, alias="PATH_BUFFER_M")
    fallback_buffers_m: List[float] = Field(default=[30.0, 60.0, 90.0, 120.0], alias="FALLBACK_BUFFERS_M")
    fallback_max_depth: int = Field(default=6, ge=0, alias="FALLBACK_MAX_DEPTH")
    fallback_max_requests: int = Field(default=64, ge=1, alias="FALLBACK_MAX_REQUESTS")

    # Local iterative detour strategy
    local_detour_enabled: bool = Field(default=True, alias="LOCAL_DETOUR_ENABLED")
    local_max_passes: int = Field(default=20, ge=1, alias="LOCAL_MAX_PASSES")
    local_intersect_buffer_m: float = Field(default=5.0, ge=0, alias="LOCAL_INTERSECT_BUFFER_M")
    local_detour_buffer_m: float = Field(default=30.0, ge=0, alias="LOCAL_DETOUR_BUFFER_M")

    # Verification / polygon adapter
    safety_subdivisions: int = Field(default=5, ge=5, alias="SAFETY_SUBDIVISIONS")
    polygon_sides: int = Field(default=12, ge=3, alias="POLYGON_SIDES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("fallback_buffers_m")
    @classmethod
    def _buffers_non_empty(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("fallback_buffers_m needs at least one buffer")
        if any(b < 0 for b in value):
            raise ValueError("fallback buffers must be >= 0")
        return sorted(value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def get_ors_api_key() -> str:
    return get_settings().ors_api_key
