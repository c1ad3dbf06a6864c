"""Human-readable reports for the separation search.

Pure formatting: every function returns a string and the caller decides
where it goes (logger or stdout).
"""

from typing import Iterable

from ..data_pipeline.partition import BucketSample

RULE = "─" * 41
BANNER = "=" * 50


def format_availability(samples: Iterable[BucketSample]) -> str:
    lines = ["Sample color availability:"]
    for s in samples:
        lines.append(f"Step {s.step} (lightness {s.lightness}): {s.count:,} colors available")
    return "\n".join(lines)


def format_failure(failure) -> str:
    """Diagnostic block for one contrast failure (a ``ContrastFailure``)."""
    f = failure
    return "\n".join([
        f"❌ FAILURE FOUND after {f.total_run:,} total tests!",
        RULE,
        f"Current distance: {f.distance}",
        f"Step 1: {f.step1} → Lightness: {f.lightness1}",
        f"  Color: RGB({f.color1.r}, {f.color1.g}, {f.color1.b})",
        f"  Y value: {f.color1.y:.4f}",
        f"Step 2: {f.step2} → Lightness: {f.lightness2}",
        f"  Color: RGB({f.color2.r}, {f.color2.g}, {f.color2.b})",
        f"  Y value: {f.color2.y:.4f}",
        f"Contrast ratio: {f.contrast:.3f}:1 (required: {f.min_contrast}:1)",
        RULE,
    ])


def format_success(result, pass_target: int, min_contrast: float) -> str:
    """Summary block for a finished search (a ``SearchResult``)."""
    r = result
    if r.exhausted:
        headline = (
            f"All {r.pass_count:,} reachable pairs passed with distance {r.distance} "
            f"(pair space exhausted before {pass_target:,})"
        )
    else:
        headline = f"All {pass_target:,} tests passed with distance {r.distance}"
    return "\n".join([
        BANNER,
        "✅ SUCCESS!",
        BANNER,
        headline,
        f"Total tests run: {r.total_run:,}",
        f"Minimum safe distance: {r.distance} steps",
        f"This ensures {r.distance}/{r.scale_max} = {r.separation_percent:.1f}% separation",
        f"guarantees at least {min_contrast}:1 contrast ratio",
    ])
