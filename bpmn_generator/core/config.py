"""
Generator Configuration Schema

Defines configuration for layout geometry, label truncation, and the
service limits, with overrides read from environment variables.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, TypeVar, Union

from bpmn_generator.core.exceptions import ConfigurationError, UnsupportedFormatError

T = TypeVar("T")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class OutputFormat(str, Enum):
    """Rendered artifact formats."""

    XML = "xml"
    JSON = "json"
    SVG = "svg"
    ASCII = "ascii"

    @classmethod
    def parse(cls, value: Union[str, "OutputFormat"]) -> "OutputFormat":
        """Resolve a format name, raising UnsupportedFormatError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFormatError(value, [f.value for f in cls]) from None


@dataclass
class LayoutConfig:
    """Geometry for the left-to-right layout."""

    base_x: float = 100
    base_y: float = 100
    spacing: float = 180

    # Box sizes by element kind
    event_size: float = 36
    gateway_size: float = 50
    task_width: float = 120
    task_height: float = 80

    def __post_init__(self) -> None:
        if self.spacing <= 0:
            raise ConfigurationError(f"Layout spacing must be positive, got {self.spacing}")
        for name in ("event_size", "gateway_size", "task_width", "task_height"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Layout {name} must be positive")

    @property
    def center_y(self) -> float:
        """Shared vertical center line for every element."""
        return self.base_y + self.task_height / 2


@dataclass
class NamingConfig:
    """Label truncation settings."""

    process_name_max: int = 30
    process_suffix: str = "プロセス"
    ellipsis: str = "..."

    def __post_init__(self) -> None:
        if self.process_name_max <= 0:
            raise ConfigurationError("process_name_max must be positive")


@dataclass
class GeneratorConfig:
    """Complete generator configuration."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    naming: NamingConfig = field(default_factory=NamingConfig)

    # Service limits
    max_text_length: int = 10000

    # Observability
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self) -> None:
        if self.max_text_length <= 0:
            raise ConfigurationError("max_text_length must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level {self.log_level!r}; expected one of {', '.join(LOG_LEVELS)}"
            )

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Create config from environment variables.

        Returns:
            GeneratorConfig instance

        Raises:
            ConfigurationError: If a variable cannot be parsed
        """
        layout = LayoutConfig(
            base_x=_env("BPMN_LAYOUT_BASE_X", float, 100.0),
            base_y=_env("BPMN_LAYOUT_BASE_Y", float, 100.0),
            spacing=_env("BPMN_LAYOUT_SPACING", float, 180.0),
        )
        naming = NamingConfig(process_name_max=_env("BPMN_PROCESS_NAME_MAX", int, 30))
        return cls(
            layout=layout,
            naming=naming,
            max_text_length=_env("BPMN_MAX_TEXT_LENGTH", int, 10000),
            log_level=os.getenv("BPMN_LOG_LEVEL", "INFO").upper(),
            json_logs=os.getenv("BPMN_JSON_LOGS", "false").lower() in ("1", "true", "yes"),
        )


def _env(name: str, cast: Callable[[str], T], default: T) -> T:
    raw: Optional[str] = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e


__all__ = ["OutputFormat", "LayoutConfig", "NamingConfig", "GeneratorConfig"]
