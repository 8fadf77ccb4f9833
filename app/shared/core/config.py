from functools import lru_cache
from threading import Lock
from typing import Optional
import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator

from app.shared.core.constants import AWS_SUPPORTED_REGIONS, DEFAULT_RESOURCES_OF_INTEREST


@lru_cache
def get_settings() -> "Settings":
    """Returns a singleton instance of the listener settings."""
    return Settings()


_settings_reload_lock = Lock()


def reload_settings_from_environment() -> "Settings":
    """
    Atomically rebuild and replace cached settings from environment values.

    This avoids mutating the cached singleton instance in-place.
    """
    logger = structlog.get_logger()
    with _settings_reload_lock:
        logger.info("settings_reload_started")
        get_settings.cache_clear()
        refreshed = get_settings()
        logger.info("settings_reload_completed")
        return refreshed


class Settings(BaseSettings):
    """
    Configuration for the onboarding stack listener.
    Uses Pydantic-Settings for environment variable parsing from .env.
    """

    # Console renderer and DEBUG level instead of JSON at INFO
    DEBUG: bool = False

    # Supplied by the Lambda runtime
    AWS_REGION: Optional[str] = None
    # Environment token embedded in every tenant stack name
    SAAS_BOOST_ENV: Optional[str] = None
    SAAS_BOOST_EVENT_BUS: Optional[str] = None

    STACK_NAME_PREFIX: str = "sb"
    EVENT_SOURCE: str = "saas-boost"
    TENANT_ID_PARAMETER: str = "TenantId"
    SERVICE_NAME_PARAMETER: str = "ServiceName"
    RESOURCES_OF_INTEREST: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESOURCES_OF_INTEREST)
    )

    AWS_CONNECT_TIMEOUT: int = 10
    AWS_READ_TIMEOUT: int = 30
    # Safety cap on list_stack_resources pages; None follows every page
    CFN_MAX_RESOURCE_PAGES: Optional[int] = None

    @model_validator(mode="after")
    def validate_all_config(self) -> "Settings":
        """Fail fast at cold start rather than on the first notification."""
        self._validate_required_environment()
        self._validate_region()
        self._validate_resources_of_interest()
        return self

    def _validate_required_environment(self) -> None:
        for name in ("AWS_REGION", "SAAS_BOOST_ENV", "SAAS_BOOST_EVENT_BUS"):
            value = getattr(self, name)
            if value is None or not str(value).strip():
                raise ValueError(f"Missing required environment variable {name}")

    def _validate_region(self) -> None:
        if self.AWS_REGION not in AWS_SUPPORTED_REGIONS:
            structlog.get_logger().warning(
                "aws_region_not_in_known_list", region=self.AWS_REGION
            )

    def _validate_resources_of_interest(self) -> None:
        from app.shared.adapters.aws_resources import AwsResource

        if not self.RESOURCES_OF_INTEREST:
            raise ValueError("RESOURCES_OF_INTEREST must name at least one resource kind")
        known = {member.name for member in AwsResource}
        unknown = [name for name in self.RESOURCES_OF_INTEREST if name not in known]
        if unknown:
            raise ValueError(
                f"Unknown resource kinds in RESOURCES_OF_INTEREST: {', '.join(unknown)}"
            )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
