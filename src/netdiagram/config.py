"""Configuration management for netdiagram using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_FILENAME = ".netdiagram.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LayoutConfig(BaseModel):
    """Tree layout geometry."""
    node_width: float = Field(alias="nodeWidth", default=120)
    node_height: float = Field(alias="nodeHeight", default=70)
    gap_x: float = Field(alias="gapX", default=30)
    gap_y: float = Field(alias="gapY", default=80)
    margin_x: float = Field(alias="marginX", default=60)
    margin_y: float = Field(alias="marginY", default=40)

    @field_validator("node_width", "node_height")
    @classmethod
    def validate_node_size(cls, v):
        if v <= 0:
            raise ValueError("node size must be > 0")
        return v

    @field_validator("gap_x", "gap_y", "margin_x", "margin_y")
    @classmethod
    def validate_spacing(cls, v):
        if v < 0:
            raise ValueError("gaps and margins must be >= 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class FrameConfig(BaseModel):
    """VLAN frame padding and collision resolution settings."""
    pad_x: float = Field(alias="padX", default=25)
    pad_top: float = Field(alias="padTop", default=45)  # room for the VLAN label
    pad_bottom: float = Field(alias="padBottom", default=25)
    frame_gap: float = Field(alias="frameGap", default=40)
    max_iterations: int = Field(alias="maxIterations", default=30)

    @field_validator("max_iterations")
    @classmethod
    def validate_max_iterations(cls, v):
        if v < 1:
            raise ValueError("max_iterations must be >= 1")
        return v

    model_config = ConfigDict(populate_by_name=True)


class NoteConfig(BaseModel):
    """Notes box geometry."""
    width: float = 280
    min_height: float = Field(alias="minHeight", default=60)
    line_height: float = Field(alias="lineHeight", default=18)
    offset_x: float = Field(alias="offsetX", default=50)

    model_config = ConfigDict(populate_by_name=True)


class InputConfig(BaseModel):
    """Connection table input settings."""
    encoding: str = "utf-8-sig"
    delimiter: str = ","
    fuzzy_match: bool = Field(alias="fuzzyMatch", default=True)

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v):
        if len(v) != 1:
            raise ValueError(f"delimiter must be a single character, got: {v!r}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class OutputConfig(BaseModel):
    """Output document settings."""
    filename: str = "network.drawio"
    diagram_name: str = Field(alias="diagramName", default="Network")

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class NetDiagramConfig(BaseModel):
    """Complete netdiagram configuration model."""
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    frames: FrameConfig = Field(default_factory=FrameConfig)
    notes: NoteConfig = Field(default_factory=NoteConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> NetDiagramConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .netdiagram.json

    Returns:
        NetDiagramConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return NetDiagramConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
        except (ValidationError, TypeError) as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e
    return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .netdiagram.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> NetDiagramConfig:
    """Create default configuration."""
    return NetDiagramConfig()
