"""Application configuration."""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


# Find .env file - check multiple possible locations
def find_env_file() -> Optional[Path]:
    """Find .env file in multiple possible locations."""
    current_dir = os.path.dirname(os.path.abspath(__file__))

    possible_paths = [
        os.path.join(current_dir, ".env"),
        os.path.join(os.path.dirname(current_dir), ".env"),
        os.path.join(os.path.dirname(os.path.dirname(current_dir)), ".env"),
    ]

    for path_str in possible_paths:
        if os.path.exists(path_str):
            path = Path(path_str)
            LOGGER.info(f"Found .env file at: {path}")
            return path

    LOGGER.debug("No .env file found in expected locations")
    return None


ENV_FILE = find_env_file()

_ENV_CONFIG = SettingsConfigDict(
    env_file=str(ENV_FILE) if ENV_FILE else None,
    env_file_encoding="utf-8",
    case_sensitive=False,
    extra="ignore",
    env_prefix="",  # No prefix for nested settings
    populate_by_name=True,
)


class LLMSettings(BaseSettings):
    """Gemini settings for extraction, code matching and valuation."""

    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", validation_alias="GEMINI_MODEL")
    gemini_vision_model: str = Field(default="gemini-2.0-flash", validation_alias="GEMINI_VISION_MODEL")
    timeout: int = Field(default=60, validation_alias="LLM_TIMEOUT")
    max_retries: int = Field(default=2, validation_alias="LLM_MAX_RETRIES")

    model_config = _ENV_CONFIG

    def model_post_init(self, __context) -> None:
        """Log settings after initialization."""
        LOGGER.info(f"Gemini API Key present: {bool(self.gemini_api_key)}")


class StorageSettings(BaseSettings):
    """Supabase object storage settings."""

    url: str = Field(default="", validation_alias="SUPABASE_URL")
    service_role_key: str = Field(default="", validation_alias="SUPABASE_SERVICE_ROLE_KEY")
    bucket: str = Field(default="loan-documents", validation_alias="STORAGE_BUCKET")
    # CDN host in front of the public bucket; falls back to SUPABASE_URL
    public_base_url: str = Field(default="", validation_alias="STORAGE_PUBLIC_BASE_URL")
    timeout: int = Field(default=30, validation_alias="STORAGE_TIMEOUT")

    model_config = _ENV_CONFIG


class RegistrySettings(BaseSettings):
    """LandsMaps registry lookups through the ZenRows proxy."""

    zenrows_api_key: str = Field(default="", validation_alias="ZENROWS_API_KEY")
    zenrows_api_url: str = Field(default="https://api.zenrows.com/v1/", validation_alias="ZENROWS_API_URL")
    base_url: str = Field(default="https://landsmaps.dol.go.th", validation_alias="LANDSMAPS_BASE_URL")
    jwt_endpoint: str = "/apiService/JWT/GetJWTAccessToken"
    parcel_endpoint: str = "/apiService/LandsMaps/GetParcelByParcelNo"

    timeout: float = Field(default=30.0, validation_alias="REGISTRY_TIMEOUT")
    max_retries: int = Field(default=3, validation_alias="REGISTRY_MAX_RETRIES")
    retry_delay: float = Field(default=2.0, validation_alias="REGISTRY_RETRY_DELAY")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        ),
        validation_alias="REGISTRY_USER_AGENT",
    )
    session_id_range: int = Field(default=10000, validation_alias="REGISTRY_SESSION_ID_RANGE")
    manual_lookup_timeout: float = Field(default=90.0, validation_alias="MANUAL_LOOKUP_TIMEOUT")

    # Proxy options forwarded on every request
    js_render: str = "true"
    premium_proxy: str = "true"
    proxy_country: str = "TH"
    custom_headers: str = "true"

    model_config = _ENV_CONFIG

    @property
    def proxy_options(self) -> dict:
        return {
            "js_render": self.js_render,
            "premium_proxy": self.premium_proxy,
            "proxy_country": self.proxy_country,
            "custom_headers": self.custom_headers,
        }


class NotificationSettings(BaseSettings):
    """LINE Messaging API settings."""

    channel_access_token: str = Field(default="", validation_alias="LINE_CHANNEL_ACCESS_TOKEN")
    group_id: str = Field(default="", validation_alias="LINE_GROUP_ID")
    api_url: str = Field(default="https://api.line.me/v2/bot/message/push", validation_alias="LINE_API_URL")
    admin_base_url: str = Field(default="https://admin-demo.unityx.group", validation_alias="ADMIN_BASE_URL")

    model_config = _ENV_CONFIG


class ReferenceDataSettings(BaseSettings):
    """Bundled province/district reference tables."""

    province_path: Path = Field(default=DATA_DIR / "province.json", validation_alias="PROVINCE_DATA_PATH")
    district_path: Path = Field(default=DATA_DIR / "amphur.json", validation_alias="DISTRICT_DATA_PATH")

    model_config = _ENV_CONFIG


class Settings(BaseSettings):
    """Unified application settings with nested models."""

    # Application Settings
    app_name: str = Field(default="Infinitex Lending API", validation_alias="APP_NAME")
    app_version: str = "0.1.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=True, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # API Settings
    api_v1_prefix: str = "/api/v1"
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")

    # Timeout Settings
    http_timeout: int = Field(default=60, validation_alias="HTTP_TIMEOUT")

    # Nested Settings - Initialize with env file explicitly
    llm: LLMSettings = Field(default_factory=lambda: LLMSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())
    registry: RegistrySettings = Field(default_factory=lambda: RegistrySettings())
    notification: NotificationSettings = Field(default_factory=lambda: NotificationSettings())
    reference: ReferenceDataSettings = Field(default_factory=lambda: ReferenceDataSettings())

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def gemini_api_key(self) -> str:
        return self.llm.gemini_api_key

    @property
    def gemini_model(self) -> str:
        return self.llm.gemini_model

    @property
    def zenrows_api_key(self) -> str:
        return self.registry.zenrows_api_key


# Initialize settings
settings = Settings()

LOGGER.info(f"Settings initialized with environment: {settings.environment}")
