"""Expression, sampling, gradient and plotting tools."""

from .expression import (
    ExpressionFunction,
    ExpressionSyntaxError,
    UnknownSymbolError,
    compile_expression,
    format_node,
    parse_expression,
)
from .gradient import GradientError, GradientProvider, PartialDerivative, SymbolicGradient
from .plotter import build_figure, build_layout, build_surface_traces, export_figure_html, plot_surface_png
from .sampler import Grid, linspace, sample_grid
from .utils import ExpressionError, SanitizationError, sanitize_math_expression

__all__ = [
    "ExpressionFunction",
    "ExpressionSyntaxError",
    "UnknownSymbolError",
    "compile_expression",
    "format_node",
    "parse_expression",
    "GradientError",
    "GradientProvider",
    "PartialDerivative",
    "SymbolicGradient",
    "build_figure",
    "build_layout",
    "build_surface_traces",
    "export_figure_html",
    "plot_surface_png",
    "Grid",
    "linspace",
    "sample_grid",
    "ExpressionError",
    "SanitizationError",
    "sanitize_math_expression",
]
