import secrets
from typing import Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.rail_bc.routing.graph_builder import GraphParameters
from src.rail_bc.routing.route_search import CostProfile


class RoutingSettings(BaseSettings):
    # Physical constants (meters, seconds)
    TRAIN_SPEED_MPS: float = 15.0
    DWELL_SECONDS: float = 5.0
    TRANSFER_SECONDS: float = 15.0
    WALK_SPEED_MPS: float = 4.0
    MAX_WALK_DISTANCE_M: float = 150.0
    THROUGH_SERVICE_SECONDS: float = 1.0
    PLATFORM_TRANSFER_SECONDS: float = 10.0

    # Ranking
    MAX_RESULTS: int = 3

    # Cost profile penalties (seconds)
    TRANSFER_AVERSE_TRANSFER_PENALTY: float = 180.0
    LOCAL_PREFERRING_TRANSFER_PENALTY: float = 30.0
    LOCAL_PREFERRING_EXPRESS_PENALTY: float = 60.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def graph_parameters(self) -> GraphParameters:
        return GraphParameters(
            train_speed=self.TRAIN_SPEED_MPS,
            dwell_seconds=self.DWELL_SECONDS,
            transfer_seconds=self.TRANSFER_SECONDS,
            walk_speed=self.WALK_SPEED_MPS,
            max_walk_distance=self.MAX_WALK_DISTANCE_M,
            through_service_seconds=self.THROUGH_SERVICE_SECONDS,
            platform_transfer_seconds=self.PLATFORM_TRANSFER_SECONDS,
        )

    def cost_profiles(self) -> Tuple[CostProfile, ...]:
        return (
            CostProfile("fastest"),
            CostProfile("transfer-averse", transfer_penalty=self.TRANSFER_AVERSE_TRANSFER_PENALTY),
            CostProfile(
                "local-preferring",
                transfer_penalty=self.LOCAL_PREFERRING_TRANSFER_PENALTY,
                express_penalty=self.LOCAL_PREFERRING_EXPRESS_PENALTY,
            ),
        )


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False  # Default to False for security
    LOG_LEVEL: str = "INFO"

    # Directory holding stations.json, services.json, through_services.json
    DATA_DIR: str = "data"

    # Admin token for /admin endpoints
    ADMIN_TOKEN: str = ""

    # Routing settings (nested)
    routing: RoutingSettings = RoutingSettings()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def validate_production_settings(self) -> None:
        """Validate critical settings for production environment.

        Raises ValueError if production settings are invalid.
        """
        errors = []

        if self.is_production:
            if not self.ADMIN_TOKEN or len(self.ADMIN_TOKEN) < 32:
                errors.append(
                    "ADMIN_TOKEN must be set to a secure value (min 32 chars) in production"
                )

            if self.DEBUG:
                errors.append("DEBUG must be False in production")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def validate_development_settings(self) -> None:
        """Set sensible defaults for development if not configured."""
        if not self.ADMIN_TOKEN:
            self.ADMIN_TOKEN = secrets.token_urlsafe(32)
            print(f"WARNING: Using auto-generated ADMIN_TOKEN for development: {self.ADMIN_TOKEN}")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create settings instance
settings = Settings()

# Validate based on environment
if settings.is_production:
    settings.validate_production_settings()
else:
    settings.validate_development_settings()
