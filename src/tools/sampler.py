"""Evenly spaced grid sampling of two-variable functions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

Matrix = List[List[float]]
Range = Tuple[float, float]


@dataclass(frozen=True)
class Grid:
    """Three parallel N x N matrices: ``x[i][j] = x_i``, ``y[i][j] = y_j``, ``z = f(x, y)``."""

    x: Matrix
    y: Matrix
    z: Matrix

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.z), len(self.z[0]) if self.z else 0

    def z_bounds(self) -> Optional[Tuple[float, float]]:
        finite = [value for row in self.z for value in row if math.isfinite(value)]
        if not finite:
            return None
        return min(finite), max(finite)

    def to_dict(self) -> Dict[str, Any]:
        """Returns a JSON-safe payload; non-finite values become ``None``."""
        return {
            "x": _json_matrix(self.x),
            "y": _json_matrix(self.y),
            "z": _json_matrix(self.z),
        }


def _json_matrix(matrix: Sequence[Sequence[float]]) -> List[List[Optional[float]]]:
    return [[value if math.isfinite(value) else None for value in row] for row in matrix]


def _validate_range(name: str, bounds: Sequence[float]) -> Range:
    if len(bounds) != 2:
        raise ValueError("{} must contain exactly two values".format(name))
    lower, upper = float(bounds[0]), float(bounds[1])
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise ValueError("{} bounds must be finite".format(name))
    if lower >= upper:
        raise ValueError("{} minimum must be smaller than its maximum".format(name))
    return lower, upper


def linspace(lower: float, upper: float, points: int) -> List[float]:
    """Returns ``points`` evenly spaced samples including both endpoints."""
    if points < 2:
        raise ValueError("points must be at least 2")
    step = (upper - lower) / float(points - 1)
    samples = [lower + i * step for i in range(points - 1)]
    samples.append(upper)
    return samples


def sample_grid(
    x_range: Sequence[float],
    y_range: Sequence[float],
    points: int,
    fn: Callable[[float, float], float],
) -> Grid:
    """Evaluates ``fn`` over a ``points`` x ``points`` grid.

    Args:
        x_range: ``(min, max)`` of the x axis.
        y_range: ``(min, max)`` of the y axis.
        points: Samples per axis, at least 2.
        fn: Scalar function of two numbers. Exceptions it raises propagate.

    Returns:
        Grid whose corner coordinates equal the range bounds exactly.

    Raises:
        ValueError: If ``points`` < 2 or a range is empty or non-finite.
    """
    x_lower, x_upper = _validate_range("x_range", x_range)
    y_lower, y_upper = _validate_range("y_range", y_range)
    xs = linspace(x_lower, x_upper, int(points))
    ys = linspace(y_lower, y_upper, int(points))

    x = [[x_val] * len(ys) for x_val in xs]
    y = [list(ys) for _ in xs]
    z = [[float(fn(x_val, y_val)) for y_val in ys] for x_val in xs]
    return Grid(x=x, y=y, z=z)
