"""Exception types shared by the pipeline, the search and the scripts.

Contrast failures and empty lightness buckets are regular outcomes of the
search and are not represented here.
"""

from __future__ import annotations


class ContrastScaleError(Exception):
    """Base class for all contrast_scale errors."""

    pass


class MissingInputError(ContrastScaleError, FileNotFoundError):
    """Raised when the color catalog or the lightness table is absent."""

    def __init__(self, what: str, path: object, hint: str = "") -> None:
        self.what = what
        self.path = path
        self.hint = hint
        message = f"{what} not found at: {path}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


class DomainValidationError(ContrastScaleError, ValueError):
    """Raised when a contrast ratio or luminance falls outside its valid range."""

    pass


class InfeasibleSeparation(ContrastScaleError):
    """Raised when the separation grows past the end of the scale."""

    def __init__(self, distance: int, scale_max: int, total_run: int) -> None:
        self.distance = distance
        self.scale_max = scale_max
        self.total_run = total_run
        super().__init__(
            f"Distance {distance} exceeds the scale range [0, {scale_max}] "
            f"after {total_run:,} tests; no separation satisfies the threshold"
        )
