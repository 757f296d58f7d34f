"""Surface bundle computation: expression text to value and gradient grids."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from src.tools.expression import compile_expression
from src.tools.gradient import GradientProvider, SymbolicGradient, derivative_labels
from src.tools.sampler import Grid, sample_grid
from src.tools.utils import DEFAULT_MAX_LENGTH
from src.utils.logger import get_logger

logger = get_logger("pipeline")


@dataclass(frozen=True)
class SamplingSettings:
    x_range: Tuple[float, float] = (-5.0, 5.0)
    y_range: Tuple[float, float] = (-5.0, 5.0)
    points: int = 100


@dataclass(frozen=True)
class SurfaceBundle:
    """Value surface and both partial-derivative surfaces of one expression."""

    expression: str
    value: Grid
    grad_x: Grid
    grad_y: Grid
    labels: Tuple[Optional[str], Optional[str]] = (None, None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expression": self.expression,
            "derivatives": {"x": self.labels[0], "y": self.labels[1]},
            "value": self.value.to_dict(),
            "grad_x": self.grad_x.to_dict(),
            "grad_y": self.grad_y.to_dict(),
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "expression": self.expression,
            "shape": list(self.value.shape),
            "derivatives": {"x": self.labels[0], "y": self.labels[1]},
            "bounds": {
                "value": self.value.z_bounds(),
                "grad_x": self.grad_x.z_bounds(),
                "grad_y": self.grad_y.z_bounds(),
            },
        }


def compute_surface_bundle(
    text: str,
    settings: Optional[SamplingSettings] = None,
    gradient_provider: Optional[GradientProvider] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> SurfaceBundle:
    """Builds the surface bundle for one expression.

    Args:
        text: User expression in ``x`` and ``y``.
        settings: Sampling domain and resolution.
        gradient_provider: Differentiation backend; SymPy when omitted.
        max_length: Maximum expression length.
        blocked_patterns: Substrings rejected by sanitization.

    Returns:
        Bundle with the value grid and both gradient grids.

    Raises:
        ExpressionError: If the text cannot be compiled.
        GradientError: If the provider cannot differentiate the expression.
    """
    settings = settings or SamplingSettings()
    provider = gradient_provider or SymbolicGradient()
    started = time.perf_counter()

    fn = compile_expression(text, max_length=max_length, blocked_patterns=blocked_patterns)
    value = _sample(settings, fn)
    partials = provider.differentiate(fn)
    grad_x = _sample(settings, partials[0])
    grad_y = _sample(settings, partials[1])

    elapsed_ms = (time.perf_counter() - started) * 1000.0
    logger.info(
        "surface_bundle_computed expression=%s points=%s elapsed_ms=%.1f",
        fn.text,
        settings.points,
        elapsed_ms,
    )
    return SurfaceBundle(
        expression=fn.text,
        value=value,
        grad_x=grad_x,
        grad_y=grad_y,
        labels=derivative_labels(partials),
    )


def _sample(settings: SamplingSettings, fn: Any) -> Grid:
    return sample_grid(settings.x_range, settings.y_range, settings.points, fn)
