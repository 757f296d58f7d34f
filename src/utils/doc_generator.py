"""Generate human-readable documentation from the YAML configuration."""

from __future__ import annotations

from pathlib import Path

from src.utils.config_loader import AppConfig


def generate_config_docs(config: AppConfig, output_path: str) -> str:
    lines = [
        "# Gradient Surface Lab configuration",
        "",
        "- version: {}".format(config.version),
        "",
        "## Domain",
        "",
        "- x_range: [{}, {}]".format(*config.domain.x_range),
        "- y_range: [{}, {}]".format(*config.domain.y_range),
        "- points: {}".format(config.domain.points),
        "",
        "## Expression",
        "",
        "- default: `{}`".format(config.expression.default),
        "- max_length: {}".format(config.expression.max_length),
        "- blocked_patterns: {}".format(", ".join("`{}`".format(p) for p in config.expression.blocked_patterns)),
        "- simplify_derivatives: {}".format(config.expression.simplify_derivatives),
        "",
        "## UI",
        "",
        "- title: {}".format(config.ui.title),
        "- install_command: `{}`".format(config.ui.install_command),
        "- copy_reset_seconds: {}".format(config.ui.copy_reset_seconds),
        "- max_points: {}".format(config.ui.max_points),
        "",
        "## API",
        "",
        "- max_points: {}".format(config.api.max_points),
        "",
        "## Surfaces",
        "",
    ]

    for key, style in config.surfaces.items():
        lines.append("### {}".format(key))
        lines.append("")
        lines.append("- name: {}".format(style.name))
        lines.append("- opacity: {}".format(style.opacity))
        lines.append("- showscale: {}".format(style.showscale))
        lines.append("- colorscale: {}".format(" -> ".join(color for _, color in style.colorscale)))
        lines.append("")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("\n".join(lines), encoding="utf-8")
    return str(output)
