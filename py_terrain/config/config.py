from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.terrain import TerrainConfig


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PY_TERRAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Terrain Generation Defaults
    default_width: float = Field(default=1000.0, description="Default terrain width")
    default_height: float = Field(default=1000.0, description="Default terrain height")
    default_radius: float = Field(default=10.0, description="Default minimum point separation")
    default_num_cities: int = Field(default=5, description="Default number of cities")
    default_num_regions: int = Field(default=0, description="Default number of regions")

    def terrain_config(self, seed: int) -> TerrainConfig:
        """Build a TerrainConfig from the defaults with the given seed."""
        return TerrainConfig(
            domain_size=(self.default_width, self.default_height),
            seed=seed,
            radius=self.default_radius,
            num_cities=self.default_num_cities,
            num_regions=self.default_num_regions,
        )


# Instantiate singleton settings object
settings = Settings()
