"""Visualization tools for value and gradient surfaces."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import plotly.graph_objects as go

from src.utils.config_loader import AppConfig, LayoutSettings, SurfaceStyleSettings, default_surfaces

if TYPE_CHECKING:  # pragma: no cover
    from src.pipeline.surface import SurfaceBundle

try:  # pragma: no cover
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
except ImportError:  # pragma: no cover
    plt = None  # type: ignore[assignment]

SURFACE_KEYS = ("value", "grad_x", "grad_y")


def _colorscale(style: SurfaceStyleSettings) -> List[List[Any]]:
    return [[position, color] for position, color in style.colorscale]


def build_surface_traces(
    bundle: "SurfaceBundle",
    styles: Optional[Mapping[str, SurfaceStyleSettings]] = None,
) -> List[Dict[str, Any]]:
    """Builds Plotly surface traces for value, d/dx and d/dy, in that order."""
    styles = styles or default_surfaces()
    traces = []
    for key in SURFACE_KEYS:
        grid = getattr(bundle, key)
        style = styles[key]
        traces.append(
            {
                "type": "surface",
                "x": grid.x,
                "y": grid.y,
                "z": grid.z,
                "colorscale": _colorscale(style),
                "opacity": style.opacity,
                "showscale": style.showscale,
                "name": style.name.format(expression=bundle.expression),
                "showlegend": True,
            }
        )
    return traces


def build_layout(layout: Optional[LayoutSettings] = None, revision: Optional[str] = None) -> Dict[str, Any]:
    layout = layout or LayoutSettings()
    x_title, y_title, z_title = layout.axis_titles
    payload: Dict[str, Any] = {
        "title": {"text": layout.title},
        "scene": {
            "xaxis": {"title": {"text": x_title}},
            "yaxis": {"title": {"text": y_title}},
            "zaxis": {"title": {"text": z_title}},
        },
        "autosize": True,
        "legend": {
            "x": 0.01,
            "y": 0.99,
            "font": {"size": layout.legend_font_size},
            "bgcolor": "rgba(255, 255, 255, 0.7)",
            "bordercolor": "#ccc",
            "borderwidth": 1,
        },
    }
    if revision is not None:
        payload["datarevision"] = revision
        # keep camera position across expression edits
        payload["uirevision"] = "surface"
    return payload


def build_figure(bundle: "SurfaceBundle", config: Optional[AppConfig] = None) -> go.Figure:
    config = config or AppConfig()
    figure = go.Figure()
    for trace in build_surface_traces(bundle, config.surfaces):
        trace = dict(trace)
        trace.pop("type")
        figure.add_trace(go.Surface(**trace))
    figure.update_layout(**build_layout(config.layout, revision=bundle.expression))
    return figure


def export_figure_html(figure: go.Figure, output_path: str) -> Dict[str, Any]:
    try:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        figure.write_html(str(output), include_plotlyjs="cdn")
        return {"ok": True, "result": str(output), "method": "plotly", "metadata": {"format": "html"}}
    except OSError as exc:
        return {"ok": False, "error": str(exc), "method": "export_figure_html", "metadata": {}}


def plot_surface_png(bundle: "SurfaceBundle", output_path: str, config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Writes a static three-panel PNG of the bundle with Matplotlib."""
    if plt is None:
        return {
            "ok": False,
            "error": "matplotlib is required for static export.",
            "method": "plot_surface_png",
            "metadata": {},
        }

    config = config or AppConfig()
    try:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        fig = plt.figure(figsize=(15, 4.8))
        for index, key in enumerate(SURFACE_KEYS, start=1):
            grid = getattr(bundle, key)
            style = config.surfaces[key]
            ax = fig.add_subplot(1, 3, index, projection="3d")
            ax.plot_surface(
                grid.x,
                grid.y,
                grid.z,
                color=style.colorscale[len(style.colorscale) // 2][1],
                alpha=style.opacity,
                linewidth=0,
            )
            ax.set_title(style.name.format(expression=bundle.expression))
            ax.set_xlabel(config.layout.axis_titles[0])
            ax.set_ylabel(config.layout.axis_titles[1])
        fig.suptitle(config.layout.title)
        fig.tight_layout()
        fig.savefig(output, dpi=150)
        plt.close(fig)

        return {"ok": True, "result": str(output), "method": "matplotlib", "metadata": {"points": bundle.value.shape[0]}}
    except Exception as exc:
        return {"ok": False, "error": str(exc), "method": "plot_surface_png", "metadata": {}}
