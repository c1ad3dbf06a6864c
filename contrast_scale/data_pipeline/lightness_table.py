"""Lightness table: scale step → target OKHSL lightness.

For every step s in [0, scale_max] (1001 steps by default):
    1. contrast = exp(ln(max_contrast) * s / scale_max)      (1 → 21)
    2. y = luminance with exactly that contrast against the reference (1.0)
    3. y → XYZ (D65 chromaticity) → LMS → cube root → Oklab L
    4. OKHSL lightness = toe(L)
    5. round to the 0.01 bucket grid (near-white band → 0.99)

Step 0 is white (1.00), step scale_max is black (0.00), and the table is
non-increasing in between. Equal step differences correspond to equal
contrast ratios, so a separation of d steps always means the same nominal
contrast no matter where on the scale it starts.

Public API:
    build_lightness_table(cfg) → LightnessTable
    save_lightness_table(table, path, cfg)
    load_lightness_table(path, scale_max) → LightnessTable

Used by:
    - scripts/precompute_lightness.py: build once and persist
    - scripts/search_separation.py: load and map sampled steps to buckets
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, Tuple, Union

from ..utils import color, fs, hashing, validators
from ..utils.validators import LightnessConfig

logger = logging.getLogger(__name__)


class LightnessTable(Sequence):
    """Immutable step → lightness lookup.

    Behaves as a read-only sequence indexed by step, so ``table[572]`` is the
    rounded lightness of step 572 and ``len(table) == scale_max + 1``.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Sequence[float]):
        if len(values) < 2:
            raise ValueError(f"Lightness table needs at least 2 steps, got {len(values)}")
        self._values: Tuple[float, ...] = tuple(float(v) for v in values)

    def __getitem__(self, step):
        return self._values[step]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LightnessTable):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"LightnessTable(steps={len(self)}, first={self._values[0]}, last={self._values[-1]})"

    @property
    def scale_max(self) -> int:
        return len(self._values) - 1

    def levels(self) -> Tuple[float, ...]:
        """Distinct lightness levels, in step order."""
        return tuple(dict.fromkeys(self._values))

    def to_dict(self) -> Dict[int, float]:
        return {step: value for step, value in enumerate(self._values)}


def compute_lightness(step: int, cfg: Optional[LightnessConfig] = None) -> float:
    """Raw (unrounded) OKHSL lightness for one scale step.

    Parameters
    ----------
    step : int
        Scale step in [0, cfg.scale_max]
    cfg : LightnessConfig, optional
        Scale definition; defaults to the standard 0-1000 scale

    Returns
    -------
    float
        OKHSL lightness in [0, 1]

    Raises
    ------
    DomainValidationError
        If the derived contrast or the reference luminance is out of range
    """
    cfg = cfg or LightnessConfig()
    contrast = color.scale_to_contrast(step, cfg.scale_max, cfg.max_contrast)
    target_luminance = color.reverse_wcag_contrast(
        contrast, cfg.reference_luminance, cfg.wcag_threshold
    )
    return color.luminance_to_okhsl_lightness(target_luminance)


def build_lightness_table(cfg: Optional[LightnessConfig] = None) -> LightnessTable:
    """Compute the rounded lightness for every step of the scale.

    Parameters
    ----------
    cfg : LightnessConfig, optional
        Scale definition and rounding rules

    Returns
    -------
    LightnessTable
        ``cfg.scale_max + 1`` rounded lightness values
    """
    cfg = cfg or LightnessConfig()
    values = []
    for step in range(cfg.scale_max + 1):
        lightness = compute_lightness(step, cfg)
        rounded = color.round_lightness(
            lightness, cfg.precision, cfg.cap_threshold, cfg.near_white
        )
        values.append(rounded)

        if step % cfg.progress_interval == 0:
            logger.info(f"Step {step}: lightness = {lightness:.6f} (rounded: {rounded})")

    return LightnessTable(values)


def save_lightness_table(
    table: LightnessTable,
    path: Union[str, Path],
    cfg: Optional[LightnessConfig] = None
) -> Path:
    """Write the table as a lightness_table.v1 YAML artifact (atomic).

    The artifact records the hash of the lightness config that produced it.
    """
    cfg = cfg or LightnessConfig()
    path = Path(path)
    artifact = {
        "schema": "lightness_table.v1",
        "scale_max": table.scale_max,
        "config_sha256": hashing.hash_dict(cfg.model_dump()),
        "values": table.to_dict(),
    }
    # Validate before writing so a bad table never reaches disk
    validators.LightnessTableV1.model_validate(artifact)
    fs.atomic_yaml_dump(artifact, path)
    logger.info(f"Saved lightness table to {path} ({len(table)} steps)")
    return path


def load_lightness_table(
    path: Union[str, Path],
    scale_max: Optional[int] = None
) -> LightnessTable:
    """Load a lightness table artifact.

    Parameters
    ----------
    path : Union[str, Path]
        Artifact path
    scale_max : int, optional
        Expected last step; mismatch raises ValueError

    Raises
    ------
    MissingInputError
        If the artifact is absent
    ValueError
        If it fails validation or has an unexpected scale
    """
    artifact = validators.load_lightness_table_file(path)
    if scale_max is not None and artifact.scale_max != scale_max:
        raise ValueError(
            f"Lightness table at {path} covers 0..{artifact.scale_max}, expected 0..{scale_max}"
        )
    table = LightnessTable([artifact.values[step] for step in range(artifact.scale_max + 1)])
    logger.info(f"Loaded {len(table)} lightness values from {path}")
    return table
