"""CLI/API/UI entrypoint for Gradient Surface Lab."""

from __future__ import annotations

import argparse
import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

from src.api import create_app
from src.pipeline import SamplingSettings, compute_surface_bundle
from src.tools import GradientError, SymbolicGradient, build_figure, export_figure_html, plot_surface_png
from src.tools.utils import ExpressionError
from src.utils import AppConfig, generate_config_docs, load_app_config
from src.utils.logger import configure_logging, get_logger

logger = get_logger("main")

STREAMLIT_APP = Path(__file__).resolve().parent / "ui" / "streamlit_app.py"


def build_parser() -> argparse.ArgumentParser:
    """Builds CLI argument parser for app entrypoints.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(description="Gradient Surface Lab")
    parser.add_argument("--mode", choices=["cli", "api", "ui"], default="cli")
    parser.add_argument("--expression", type=str, default=None, help="Expression f(x, y); configured default when omitted")
    parser.add_argument("--points", type=int, default=None, help="Samples per axis")
    parser.add_argument("--html", type=str, default=None, help="Write the interactive figure to this HTML file")
    parser.add_argument("--png", type=str, default=None, help="Write a static PNG rendering to this file")
    parser.add_argument("--config", type=str, default="configs/app_config.yml")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", type=str, default=None)
    parser.add_argument("--generate-docs", action="store_true", help="Generate markdown docs from the YAML config")
    parser.add_argument("--docs-output", type=str, default="docs/CONFIGURATION.md")
    return parser


def run_cli(
    config: AppConfig,
    expression: Optional[str] = None,
    points: Optional[int] = None,
    html_path: Optional[str] = None,
    png_path: Optional[str] = None,
) -> int:
    """Computes one surface bundle and prints its summary as JSON.

    Args:
        config: Application settings.
        expression: Expression text; the configured default when omitted.
        points: Samples per axis override.
        html_path: Optional interactive HTML output path.
        png_path: Optional static PNG output path.

    Returns:
        Process exit code: 0 on success, 2 for a rejected expression, 1 for a failed export.
    """
    text = expression if expression is not None else config.expression.default
    settings = SamplingSettings(
        x_range=config.domain.x_range,
        y_range=config.domain.y_range,
        points=int(points) if points is not None else config.domain.points,
    )

    try:
        bundle = compute_surface_bundle(
            text,
            settings=settings,
            gradient_provider=SymbolicGradient(simplify=config.expression.simplify_derivatives),
            max_length=config.expression.max_length,
            blocked_patterns=config.expression.blocked_patterns,
        )
    except (ExpressionError, GradientError) as exc:
        logger.error("expression_rejected text=%r error=%s", text, exc)
        print(json.dumps({"ok": False, "error": str(exc), "expression": text}, ensure_ascii=False))
        return 2

    summary = bundle.summary()
    exports = []
    if html_path:
        exports.append(export_figure_html(build_figure(bundle, config), html_path))
    if png_path:
        exports.append(plot_surface_png(bundle, png_path, config))
    if exports:
        summary["exports"] = exports

    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0 if all(item["ok"] for item in exports) else 1


def run_api(config: AppConfig, host: str, port: int) -> int:
    """Runs FastAPI server using Uvicorn.

    Args:
        config: Application settings.
        host: Bind host.
        port: Bind port.

    Returns:
        Process exit code.
    """
    import uvicorn

    app = create_app(config)
    uvicorn.run(app, host=host, port=port)
    return 0


def run_ui(config_path: str) -> int:
    """Starts the Streamlit page in a child process."""
    command = [sys.executable, "-m", "streamlit", "run", str(STREAMLIT_APP)]
    logger.info("ui_starting command=%s", " ".join(command))
    env_override = {"GRADIENT_SURFACE_CONFIG": str(Path(config_path).resolve())}
    return subprocess.call(command, env={**os.environ, **env_override})


def main(argv: Optional[list] = None) -> int:
    """Application entrypoint for CLI, API and UI modes.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.points is not None and args.points < 2:
        parser.error("--points must be at least 2")
    config = load_app_config(args.config)
    configure_logging(args.log_level or str(config.logging.get("level", "INFO")))

    if args.generate_docs:
        output = generate_config_docs(config, args.docs_output)
        print("Configuration docs generated at {}".format(output))
        return 0

    if args.mode == "api":
        return run_api(config, args.host, args.port)
    if args.mode == "ui":
        return run_ui(args.config)
    return run_cli(config, expression=args.expression, points=args.points, html_path=args.html, png_path=args.png)


if __name__ == "__main__":
    raise SystemExit(main())
