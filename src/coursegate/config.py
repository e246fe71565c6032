"""Configuration for coursegate.

Pydantic-validated settings shared by the mutator, the editors and the
logging setup. Direct os.environ/os.getenv usage is limited to
``load_config_from_env()``; everything else receives an ``AccessConfig``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessConfig(BaseModel):
    """Settings for access management.

    Environment variables:
        LOG_LEVEL     logging level (default: INFO)
        LOG_JSON      JSON log format (default: false)
        SERVICE_NAME  logger name used by setup_logging
        ADMIN_ROLE    role allowed to change grants (default: admin)
        MEMBER_ROLE   role targeted by bulk course access (default: member)
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name for logger identification (e.g. 'lms-admin')",
    )

    # Roles
    admin_role: str = Field(
        default="admin",
        description="Role whose accounts may change access grants",
    )
    member_role: str = Field(
        default="member",
        description="Role of accounts affected by bulk course access",
    )

    @field_validator("admin_role", "member_role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        """Roles must be non-empty."""
        v = v.strip()
        if not v:
            raise ValueError("Role name must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_config_from_env() -> AccessConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Service name for logging
    - ADMIN_ROLE: Admin role name (default: admin)
    - MEMBER_ROLE: Member role name (default: member)

    Returns:
        AccessConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: If an environment value fails validation.
    """
    import os

    try:
        return AccessConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
            service_name=os.getenv("SERVICE_NAME"),
            admin_role=os.getenv("ADMIN_ROLE", "admin"),
            member_role=os.getenv("MEMBER_ROLE", "member"),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}", errors=e.errors()) from e


__all__ = [
    "AccessConfig",
    "LogLevel",
    "load_config_from_env",
]
