"""Configuration loader for YAML-based application settings."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

DEFAULT_CONFIG_PATH = "configs/app_config.yml"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


@dataclass
class DomainSettings:
    x_range: Tuple[float, float] = (-5.0, 5.0)
    y_range: Tuple[float, float] = (-5.0, 5.0)
    points: int = 100


@dataclass
class ExpressionSettings:
    default: str = "x ** 2 + y ** 2"
    max_length: int = 400
    blocked_patterns: List[str] = field(default_factory=lambda: ["__", "import", "exec", "eval", "lambda"])
    simplify_derivatives: bool = False


@dataclass
class UISettings:
    title: str = "Gradient Surface Lab"
    install_command: str = "pip install gradient-surface-lab"
    copy_reset_seconds: float = 2.0
    max_points: int = 200


@dataclass
class ApiSettings:
    max_points: int = 250


@dataclass
class SurfaceStyleSettings:
    name: str
    colorscale: List[Tuple[float, str]]
    opacity: float = 1.0
    showscale: bool = False


def default_surfaces() -> Dict[str, SurfaceStyleSettings]:
    return {
        "value": SurfaceStyleSettings(
            name="f(x,y) = {expression}",
            colorscale=[(0.0, "#ffcb80"), (0.5, "#ff9500"), (1.0, "#ff7b00")],
            opacity=1.0,
            showscale=True,
        ),
        "grad_x": SurfaceStyleSettings(
            name="∂f/∂x (gradient w.r.t x)",
            colorscale=[(0.0, "#80d6ff"), (0.5, "#00b3ff"), (1.0, "#0091d9")],
            opacity=0.7,
        ),
        "grad_y": SurfaceStyleSettings(
            name="∂f/∂y (gradient w.r.t y)",
            colorscale=[(0.0, "#ff80b0"), (0.5, "#ff3d7f"), (1.0, "#e60052")],
            opacity=0.7,
        ),
    }


@dataclass
class LayoutSettings:
    title: str = "3D Surface Plot with Gradient Visualization"
    axis_titles: Tuple[str, str, str] = ("x", "y", "f")
    legend_font_size: int = 15


@dataclass
class AppConfig:
    version: str = "1.0.0"
    domain: DomainSettings = field(default_factory=DomainSettings)
    expression: ExpressionSettings = field(default_factory=ExpressionSettings)
    ui: UISettings = field(default_factory=UISettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    surfaces: Dict[str, SurfaceStyleSettings] = field(default_factory=default_surfaces)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    logging: Dict[str, Any] = field(default_factory=dict)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("Configuration file not found: {}".format(path))
    with path.open("r", encoding="utf-8") as handle:
        try:
            loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError("Invalid YAML in {}: {}".format(path, exc)) from exc
    if not isinstance(loaded, dict):
        raise ConfigError("Configuration root must be a mapping in {}".format(path))
    return loaded


def _range(value: Any, key: str, default: Tuple[float, float]) -> Tuple[float, float]:
    if value is None:
        return default
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigError("'{}' must be a two-item list".format(key))
    lower, upper = float(value[0]), float(value[1])
    if not (math.isfinite(lower) and math.isfinite(upper)) or lower >= upper:
        raise ConfigError("'{}' must be finite with min < max".format(key))
    return lower, upper


def _colorscale(value: Any, key: str) -> List[Tuple[float, str]]:
    if not isinstance(value, list) or not value:
        raise ConfigError("'{}' must be a non-empty list of [position, color] pairs".format(key))
    stops = []
    for item in value:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ConfigError("'{}' entries must be [position, color] pairs".format(key))
        stops.append((float(item[0]), str(item[1])))
    return stops


def _surfaces(data: Dict[str, Any]) -> Dict[str, SurfaceStyleSettings]:
    surfaces = default_surfaces()
    for key, payload in data.items():
        if key not in surfaces:
            raise ConfigError("Unknown surface '{}'; expected one of {}".format(key, sorted(surfaces)))
        if not isinstance(payload, dict):
            raise ConfigError("Surface '{}' must be a mapping".format(key))
        base = surfaces[key]
        surfaces[key] = SurfaceStyleSettings(
            name=str(payload.get("name", base.name)),
            colorscale=_colorscale(payload["colorscale"], "surfaces.{}.colorscale".format(key))
            if "colorscale" in payload
            else base.colorscale,
            opacity=float(payload.get("opacity", base.opacity)),
            showscale=bool(payload.get("showscale", base.showscale)),
        )
    return surfaces


def load_app_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    data = _load_yaml(Path(path))
    domain_data = data.get("domain", {}) or {}
    expression_data = data.get("expression", {}) or {}
    ui_data = data.get("ui", {}) or {}
    api_data = data.get("api", {}) or {}
    layout_data = data.get("layout", {}) or {}

    try:
        domain = DomainSettings(
            x_range=_range(domain_data.get("x_range"), "domain.x_range", (-5.0, 5.0)),
            y_range=_range(domain_data.get("y_range"), "domain.y_range", (-5.0, 5.0)),
            points=int(domain_data.get("points", 100)),
        )
        expression = ExpressionSettings(
            default=str(expression_data.get("default", "x ** 2 + y ** 2")),
            max_length=int(expression_data.get("max_length", 400)),
            blocked_patterns=[str(item) for item in expression_data.get("blocked_patterns", [])]
            or ExpressionSettings().blocked_patterns,
            simplify_derivatives=bool(expression_data.get("simplify_derivatives", False)),
        )
        ui = UISettings(
            title=str(ui_data.get("title", UISettings.title)),
            install_command=str(ui_data.get("install_command", UISettings.install_command)),
            copy_reset_seconds=float(ui_data.get("copy_reset_seconds", 2.0)),
            max_points=int(ui_data.get("max_points", 200)),
        )
        api = ApiSettings(max_points=int(api_data.get("max_points", 250)))
        axis_titles = layout_data.get("axis_titles", ["x", "y", "f"])
        layout = LayoutSettings(
            title=str(layout_data.get("title", LayoutSettings.title)),
            axis_titles=(str(axis_titles[0]), str(axis_titles[1]), str(axis_titles[2])),
            legend_font_size=int(layout_data.get("legend_font_size", 15)),
        )
    except (TypeError, ValueError, IndexError) as exc:
        raise ConfigError("Invalid configuration value in {}: {}".format(path, exc)) from exc

    if domain.points < 2:
        raise ConfigError("'domain.points' must be at least 2")
    if ui.copy_reset_seconds <= 0:
        raise ConfigError("'ui.copy_reset_seconds' must be positive")

    return AppConfig(
        version=str(data.get("version", "1.0.0")),
        domain=domain,
        expression=expression,
        ui=ui,
        api=api,
        surfaces=_surfaces(data.get("surfaces", {}) or {}),
        layout=layout,
        logging=dict(data.get("logging", {}) or {}),
    )
