"""
Configuration management for the bridge client.

Provides configuration schema, validation, generation and JSON persistence.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import codecs
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .constants import (
    DEFAULT_HOST,
    DEFAULT_LOCAL_ENCODING,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_PORT,
    DEFAULT_WIRE_ENCODING,
)
from .exceptions import ConfigurationError


def normalize_encoding(name: str) -> str:
    """Return the canonical codec name for an encoding name.

    Args:
        name: Encoding name as given by the user (e.g. "ASCII", "latin1")

    Returns:
        Canonical codec name (e.g. "ascii", "iso8859-1")

    Raises:
        ValueError: If the encoding is unknown to the codec registry
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Encoding name must be a non-empty string")
    try:
        return codecs.lookup(name.strip()).name
    except LookupError:
        raise ValueError(f"Unsupported encoding: {name}")


class BridgeConfig(BaseModel):
    """Bridge client configuration."""

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,
        "frozen": True,
    }

    host: str = Field(default=DEFAULT_HOST, description="Proxy server host")
    port: int = Field(default=DEFAULT_PORT, description="Proxy server port")
    wire_encoding: str = Field(
        default=DEFAULT_WIRE_ENCODING,
        validation_alias=AliasChoices("wire_encoding", "jdbc_encoding"),
        description="Charset used on the wire (JDBC side)",
    )
    local_encoding: str = Field(
        default=DEFAULT_LOCAL_ENCODING,
        validation_alias=AliasChoices("local_encoding", "app_encoding"),
        description="Charset used by the application",
    )
    timeout: Optional[float] = Field(
        default=None,
        description="Socket timeout in seconds (default: None, block forever)",
    )
    max_line_length: int = Field(
        default=DEFAULT_MAX_LINE_LENGTH,
        description="Maximum accepted reply line length in bytes",
    )
    log: Optional[str] = Field(default=None, description="Path to log file")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate host is not empty."""
        if not v or not v.strip():
            raise ValueError("Host must not be empty")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator("wire_encoding", "local_encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate encoding name against the codec registry."""
        return normalize_encoding(v)

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v

    @field_validator("max_line_length")
    @classmethod
    def validate_max_line_length(cls, v: int) -> int:
        """Validate line length limit is positive."""
        if v <= 0:
            raise ValueError(f"max_line_length must be positive, got {v}")
        return v

    @classmethod
    def from_options(cls, **options: Any) -> "BridgeConfig":
        """Build configuration from keyword options.

        Options set to None are left at their defaults.

        Raises:
            ConfigurationError: If any option is invalid
        """
        values = {k: v for k, v in options.items() if v is not None}
        try:
            return cls(**values)
        except PydanticValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e

    def merged(self, **overrides: Any) -> "BridgeConfig":
        """Return a copy with non-None overrides applied and re-validated."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return BridgeConfig.from_options(**values)


def _format_validation_error(error: PydanticValidationError) -> str:
    """Flatten pydantic errors into one line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "config"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def generate_config(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    wire_encoding: str = DEFAULT_WIRE_ENCODING,
    local_encoding: str = DEFAULT_LOCAL_ENCODING,
    timeout: Optional[float] = None,
    log: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Generate configuration dictionary.

    Args:
        host: Proxy server host
        port: Proxy server port
        wire_encoding: Charset used on the wire
        local_encoding: Charset used by the application
        timeout: Optional socket timeout in seconds
        log: Optional path to log file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If any value is invalid
    """
    config = BridgeConfig.from_options(
        host=host,
        port=port,
        wire_encoding=wire_encoding,
        local_encoding=local_encoding,
        timeout=timeout,
        log=log,
    )
    return config.model_dump()


def validate_config(
    config_path: Path,
) -> tuple[bool, Optional[str], Optional[BridgeConfig]]:
    """
    Validate configuration file.

    Args:
        config_path: Path to configuration file

    Returns:
        Tuple of (is_valid, error_message, config_object)
    """
    try:
        if not config_path.exists():
            return False, f"Configuration file not found: {config_path}", None

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        if not isinstance(config_data, dict):
            return False, "Configuration root must be a JSON object", None

        config = BridgeConfig.from_options(**config_data)
        return True, None, config

    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {str(e)}", None
    except ConfigurationError as e:
        return False, f"Validation error: {str(e)}", None
    except OSError as e:
        return False, f"Cannot read configuration: {str(e)}", None


def load_config(config_path: Path) -> BridgeConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        BridgeConfig object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    is_valid, error, config = validate_config(config_path)
    if not is_valid or config is None:
        raise ConfigurationError(error or "Invalid configuration")
    return config


def save_config(config: Dict[str, Any], config_path: Path) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)
