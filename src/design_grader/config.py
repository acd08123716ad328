"""Centralized configuration management for the design grader.

Configuration covers how workbooks are read and presented. The grading
rubric itself is fixed (see ``rubric.py``) and is not configurable.
"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field


class SheetNamesConfig(BaseModel):
    """Worksheet titles accepted for each logical sheet.

    Titles are matched case-insensitively, first match wins.
    """
    main: list[str] = Field(default_factory=lambda: ["Main"], description="Main design sheet")
    aero: list[str] = Field(default_factory=lambda: ["Aero"], description="Aerodynamics tab")
    miss: list[str] = Field(default_factory=lambda: ["Miss", "Mission"], description="Mission analysis tab")
    consts: list[str] = Field(
        default_factory=lambda: ["Consts", "Constraints"],
        description="Constraint curve tab"
    )
    gear: list[str] = Field(default_factory=lambda: ["Gear", "Landing Gear"], description="Landing gear tab")
    geom: list[str] = Field(default_factory=lambda: ["Geom", "Geometry"], description="Planform geometry tab")

    def lookup(self) -> dict[str, str]:
        """Map lower-cased worksheet titles to sheet keys."""
        mapping = {}
        for key, titles in self.model_dump().items():
            for title in titles:
                mapping.setdefault(title.strip().lower(), key)
        return mapping


class StealthConfig(BaseModel):
    """Planform edge-alignment rules for the default stealth shaping check.

    Leading-edge sweeps are read from one row of the main sheet; every
    aligned surface must match the reference surface's sweep.
    """
    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(True, description="Run the stealth shaping check")
    sweep_row: int = Field(21, description="Main-sheet row holding leading-edge sweep (deg)")
    reference_column: str = Field("B", description="Column of the reference surface (wing)")
    aligned_columns: dict[str, str] = Field(
        default_factory=lambda: {"C": "Pitch control surface", "H": "Vertical tail"},
        description="Column -> surface name for surfaces that must align with the reference"
    )
    tolerance_deg: float = Field(5.0, description="Allowed sweep mismatch in degrees")


class OutputConfig(BaseModel):
    """Presentation settings for the CLI."""
    log_level: str = Field("WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    show_bucket_table: bool = Field(True, description="Show the bucket table in formatted output")


class GraderConfig(BaseModel):
    """Complete configuration for the design grader."""
    model_config = ConfigDict(frozen=True)

    sheets: SheetNamesConfig = Field(default_factory=SheetNamesConfig)
    stealth: StealthConfig = Field(default_factory=StealthConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


CONFIG_ENV_VAR = "DESIGN_GRADER_CONFIG"
CONFIG_FILE_NAMES = ("grader-config.yaml", "grader-config.yml")

DEFAULT_CONFIG_HEADER = """# Design Grader Configuration
#
# Worksheet name matching, the stealth shaping check and CLI output.
# The grading rubric itself is fixed.

"""


def load_config(path: Union[str, Path]) -> GraderConfig:
    """Load configuration from a YAML file; missing sections keep their defaults."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return GraderConfig.model_validate(data or {})


def find_config_file() -> Optional[Path]:
    """Find a config file via $DESIGN_GRADER_CONFIG, then the working directory."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    candidates = [Path(env_path)] if env_path else []
    candidates += [Path(name) for name in CONFIG_FILE_NAMES]
    return next((path for path in candidates if path.exists()), None)


def save_default_config(path: Path) -> None:
    """Write the default configuration as commented YAML."""
    data = GraderConfig().model_dump()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(DEFAULT_CONFIG_HEADER)
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
