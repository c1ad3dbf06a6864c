"""YAML schema validation and config loading.

Provides centralized validation using pydantic:
    - Project config (contrast_scale.v1): catalog, lightness, search,
      seen-set and logging sections
    - Lightness table artifact (lightness_table.v1): 1001 steps → lightness

Validated models are frozen: the loaded config is the immutable value
injected into every component. CLI overrides go through ``with_overrides``,
which re-validates instead of mutating.

Ranges:
    - Contrast ratios: [1, 21]
    - Luminance and lightness: [0, 1]
    - Scale steps: integers in [0, scale_max]

Usage:
    from contrast_scale.utils import validators

    cfg = validators.load_config("configs/contrast_scale_v1.yaml")
    cfg = validators.with_overrides(cfg, {"search": {"seed": 7}})
    table = validators.load_lightness_table_file("lightness_values.yaml")
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "contrast_scale_v1.yaml"


# ============================================================================
# PROJECT CONFIG V1
# ============================================================================

class CatalogConfig(BaseModel):
    """Color catalog location and bulk I/O settings."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field("colors.db", description="SQLite catalog path")
    batch_size: int = Field(10_000, gt=0, description="Rows per insert transaction")
    load_update_interval: int = Field(500_000, gt=0, description="Rows between load progress lines")


class LightnessConfig(BaseModel):
    """Scale step → lightness mapping."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    scale_max: int = Field(1000, ge=1, description="Last scale step (table has scale_max + 1 entries)")
    max_contrast: float = Field(21.0, gt=1.0, le=21.0, description="Contrast at the last step")
    reference_luminance: float = Field(1.0, ge=0.0, le=1.0, description="Luminance contrasts are measured against")
    wcag_threshold: float = Field(0.18, ge=0.0, le=1.0, description="Lighter/darker switch in the WCAG inversion")
    precision: int = Field(100, gt=0, description="Rounding grid (100 = two decimals)")
    cap_threshold: float = Field(0.995, gt=0.0, lt=1.0, description="Start of the near-white band")
    near_white: float = Field(0.99, gt=0.0, lt=1.0, description="Bucket for near-white lightness")
    output_path: str = Field("lightness_values.yaml", description="Lightness table artifact")
    progress_interval: int = Field(100, gt=0, description="Steps between progress lines")


class SeenSetConfig(BaseModel):
    """Pair deduplication structure, rebuilt at every distance."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["bloom", "exact"] = Field("bloom", description="Probabilistic or exact membership")
    expected_items: int = Field(100_000_000, gt=0, description="Bloom sizing: expected insertions")
    false_positive_rate: float = Field(0.001, gt=0.0, lt=1.0, description="Bloom sizing: target FP rate")


class SearchConfig(BaseModel):
    """Adaptive separation search parameters."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    min_contrast: float = Field(4.5, ge=1.0, le=21.0, description="Required contrast ratio")
    initial_distance: int = Field(571, ge=1, description="First separation hypothesis (steps)")
    pass_target: int = Field(100_000_000, gt=0, description="Passing tests needed to accept a distance")
    max_idle_draws: int = Field(1_000_000, gt=0, description="Consecutive discarded draws before a distance counts as exhausted")
    seed: Optional[int] = Field(None, ge=0, description="Random seed; None draws one from OS entropy")
    test_update_interval: int = Field(50_000, gt=0, description="Passes between progress lines")
    sample_display_interval: int = Field(200, gt=0, description="Step interval of the availability table")


class LoggingConfig(BaseModel):
    """Logging setup shared by all scripts."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = Field("INFO", description="Root log level")
    file: Optional[str] = Field(None, description="Optional log file")
    json_format: bool = Field(False, description="Write the log file as JSON lines")
    color: bool = Field(True, description="ANSI colors on a TTY")
    rotate_max_bytes: Optional[int] = Field(None, gt=0, description="Rotate the log file at this size")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return v


class ProjectConfigV1(BaseModel):
    """Complete configuration (contrast_scale.v1 schema)."""
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    schema_version: str = Field("contrast_scale.v1", alias="schema", description="Schema version")
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    lightness: LightnessConfig = Field(default_factory=LightnessConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    seen_set: SeenSetConfig = Field(default_factory=SeenSetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "contrast_scale.v1":
            raise ValueError(f"Expected schema 'contrast_scale.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_cross_section(self) -> 'ProjectConfigV1':
        """Initial distance must fit on the scale; near-white must sit below the cap."""
        if self.search.initial_distance > self.lightness.scale_max:
            raise ValueError(
                f"search.initial_distance={self.search.initial_distance} exceeds "
                f"lightness.scale_max={self.lightness.scale_max}"
            )
        if self.search.min_contrast > self.lightness.max_contrast:
            raise ValueError(
                f"search.min_contrast={self.search.min_contrast} is above "
                f"lightness.max_contrast={self.lightness.max_contrast}; no separation can satisfy it"
            )
        if self.lightness.near_white >= self.lightness.cap_threshold:
            raise ValueError(
                f"lightness.near_white={self.lightness.near_white} must be below "
                f"cap_threshold={self.lightness.cap_threshold}"
            )
        return self


# ============================================================================
# LIGHTNESS TABLE ARTIFACT V1
# ============================================================================

class LightnessTableV1(BaseModel):
    """Serialized lightness table (lightness_table.v1 schema)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: str = Field("lightness_table.v1", alias="schema", description="Schema version")
    scale_max: int = Field(..., ge=1, description="Last step")
    config_sha256: Optional[str] = Field(None, description="Hash of the lightness config that produced it")
    values: Dict[int, float] = Field(..., description="Step → rounded OKHSL lightness")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "lightness_table.v1":
            raise ValueError(f"Expected schema 'lightness_table.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_steps(self) -> 'LightnessTableV1':
        """Every step present once, values in [0, 1], non-increasing with step."""
        expected = set(range(self.scale_max + 1))
        actual = set(self.values)
        if actual != expected:
            missing = sorted(expected - actual)[:5]
            extra = sorted(actual - expected)[:5]
            raise ValueError(
                f"Lightness table must cover steps 0..{self.scale_max}; "
                f"missing={missing} unexpected={extra}"
            )
        previous = None
        for step in range(self.scale_max + 1):
            value = self.values[step]
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Step {step}: lightness {value} out of range [0, 1]")
            if previous is not None and value > previous:
                raise ValueError(
                    f"Step {step}: lightness {value} exceeds step {step - 1} ({previous}); "
                    "table must be non-increasing"
                )
            previous = value
        return self


# ============================================================================
# PUBLIC API
# ============================================================================

def load_config(path: Optional[Union[str, Path]] = None) -> ProjectConfigV1:
    """Load and validate the project config from YAML.

    Parameters
    ----------
    path : Union[str, Path], optional
        Path to a contrast_scale.v1 YAML file. None loads the shipped
        ``configs/contrast_scale_v1.yaml``, or built-in defaults if that file
        is not present (installed package).

    Returns
    -------
    ProjectConfigV1
        Validated, frozen configuration

    Raises
    ------
    FileNotFoundError
        If an explicit path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return ProjectConfigV1()
        path = DEFAULT_CONFIG_PATH

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return ProjectConfigV1.model_validate(data)
    except Exception as e:
        raise ValueError(f"Config validation failed at {path}: {e}") from e


def with_overrides(cfg: ProjectConfigV1, overrides: Dict[str, Dict[str, Any]]) -> ProjectConfigV1:
    """Return a re-validated copy of ``cfg`` with per-section overrides.

    Parameters
    ----------
    cfg : ProjectConfigV1
        Base configuration
    overrides : Dict[str, Dict[str, Any]]
        ``{section: {field: value}}``; None values are ignored so argparse
        defaults can be passed straight through

    Returns
    -------
    ProjectConfigV1
        New validated configuration

    Examples
    --------
    >>> cfg = with_overrides(cfg, {"search": {"seed": 42, "pass_target": None}})
    """
    data = cfg.model_dump(by_alias=True)
    for section, fields in overrides.items():
        if section not in data:
            raise ValueError(f"Unknown config section '{section}'")
        data[section].update({k: v for k, v in fields.items() if v is not None})
    try:
        return ProjectConfigV1.model_validate(data)
    except Exception as e:
        raise ValueError(f"Config override validation failed: {e}") from e


def load_lightness_table_file(path: Union[str, Path]) -> LightnessTableV1:
    """Load and validate a lightness table artifact.

    Parameters
    ----------
    path : Union[str, Path]
        Path to lightness_table.v1 YAML

    Returns
    -------
    LightnessTableV1
        Validated table

    Raises
    ------
    MissingInputError
        If the file doesn't exist
    ValueError
        If validation fails
    """
    from . import fs

    path = fs.require_file(path, "Lightness table", "run scripts/precompute_lightness.py first")
    data = fs.load_yaml(path)
    try:
        return LightnessTableV1.model_validate(data)
    except Exception as e:
        raise ValueError(f"Lightness table validation failed at {path}: {e}") from e
