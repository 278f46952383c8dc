"""Application configuration and settings management."""

from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_DESK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Bus Route Desk"
    api_prefix: str = "/api"
    optimizer_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the route optimization service (e.g., http://localhost:8080).",
    )
    optimizer_timeout_seconds: float = Field(
        default=120.0,
        gt=0.0,
        description="Optimization runs are slow; the service answers only once the solver stops.",
    )
    depot_prefix: str = Field(default="DEPOT", min_length=1, description="Stop id prefix marking a depot.")
    time_limit: int = Field(default=30, ge=1, description="Default solver time limit in seconds.")
    capacity: int = Field(default=45, ge=1, description="Default bus capacity (passengers).")
    service_time: int = Field(default=1, ge=0, description="Default dwell time per stop in minutes.")
    db_name: str = Field(default="INC4.csv", description="Default stop dataset on the optimization service.")
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("optimizer_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().rstrip("/")
            return value or None
        return value

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
