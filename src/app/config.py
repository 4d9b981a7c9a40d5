"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "tile-playground"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Vector tile source
    tile_server_url: str = "https://tiles.eubucco.com"
    tile_layer: str = "public.data_building"   # URL path segment and decoded layer name
    tile_properties: str = "id,id_source,type,type_source,height,age"
    tile_fetch_policy: str = "all_or_nothing"   # "all_or_nothing", "retry" or "skip"
    tile_fetch_retries: int = 2                 # extra attempts under "retry"
    tile_fetch_timeout: float = 30.0            # seconds per request

    # Map view, Vienna by default.  World width is 2**map_scale_exponent px.
    map_center_lng: float = 16.3731
    map_center_lat: float = 48.2083
    map_scale_exponent: float = 26.0
    rewind_after_union: bool = True             # False reproduces inside-out unions

    # Viewport (read once at startup; no resize handling)
    viewport_width: int = 1280
    viewport_height: int = 800
    device_pixel_ratio: float = 1.0

    # Shape drop
    svg_path: str = "data/Alsergrund.svg"
    svg_group_id: str = "PatchCollection_1"
    physics_batch_size: int = 50
    physics_simplify_tolerance: float = 0.3
    physics_border_thickness: float = 50.0
    physics_attractor_count: int = 5
    physics_attraction_strength: float = 1.0
    physics_density: float = 0.001
    physics_iterations: int = 6

    @property
    def tile_property_list(self) -> list[str]:
        return [p.strip() for p in self.tile_properties.split(",") if p.strip()]


settings = Settings()
