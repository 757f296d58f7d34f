"""Streamlit frontend: type f(x, y), see its surface and gradient surfaces."""

from __future__ import annotations

import json
import os
import sys
import time
from pathlib import Path
from typing import Tuple

import streamlit as st
import streamlit.components.v1 as components

try:
    from src.pipeline.surface import SamplingSettings, compute_surface_bundle
except ModuleNotFoundError:
    project_root = Path(__file__).resolve().parents[2]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))
    from src.pipeline.surface import SamplingSettings, compute_surface_bundle

from src.tools.gradient import SymbolicGradient
from src.tools.plotter import build_figure
from src.ui.state import CopyPressed, TextChanged, Tick, ViewState, build_initial_state, is_copy_acknowledged, reduce
from src.utils.config_loader import DEFAULT_CONFIG_PATH, AppConfig, load_app_config
from src.utils.logger import configure_logging, get_logger

CONFIG_ENV_VAR = "GRADIENT_SURFACE_CONFIG"
STATE_KEY = "view_state"
SETTINGS_KEY = "sampling_settings"
INPUT_KEY = "expression_input"

logger = get_logger("ui.streamlit")


@st.cache_resource(show_spinner=False)
def _load_config(path: str) -> AppConfig:
    config = load_app_config(path)
    configure_logging(str(config.logging.get("level", "INFO")))
    return config


def _compute_fn(config: AppConfig, settings: SamplingSettings):
    provider = SymbolicGradient(simplify=config.expression.simplify_derivatives)

    def compute(text: str):
        return compute_surface_bundle(
            text,
            settings=settings,
            gradient_provider=provider,
            max_length=config.expression.max_length,
            blocked_patterns=config.expression.blocked_patterns,
        )

    return compute


def _dispatch(config: AppConfig, event) -> None:
    settings = st.session_state[SETTINGS_KEY]
    st.session_state[STATE_KEY] = reduce(
        st.session_state[STATE_KEY],
        event,
        compute=_compute_fn(config, settings),
        copy_reset_seconds=config.ui.copy_reset_seconds,
    )


def _render_sidebar(config: AppConfig) -> SamplingSettings:
    """Renders domain controls and returns the selected sampling settings."""
    with st.sidebar:
        st.header("Domain")
        x_range = _range_inputs("x", config.domain.x_range)
        y_range = _range_inputs("y", config.domain.y_range)
        points = st.slider(
            "Samples per axis",
            min_value=2,
            max_value=max(config.ui.max_points, config.domain.points),
            value=config.domain.points,
        )
    return SamplingSettings(x_range=x_range, y_range=y_range, points=int(points))


def _range_inputs(axis: str, default: Tuple[float, float]) -> Tuple[float, float]:
    left, right = st.columns(2)
    lower = left.number_input("{} min".format(axis), value=float(default[0]), step=0.5)
    upper = right.number_input("{} max".format(axis), value=float(default[1]), step=0.5)
    if lower >= upper:
        st.warning("{} min must be smaller than {} max; using defaults.".format(axis, axis))
        return default
    return float(lower), float(upper)


@st.fragment(run_every=0.5)
def _render_copy_block(config: AppConfig) -> None:
    """Install command with a copy button whose acknowledgement clears itself."""
    _dispatch(config, Tick(time.time()))
    st.code(config.ui.install_command, language="bash")
    if st.button("Copy install command"):
        _dispatch(config, CopyPressed(time.time()))
        components.html(
            "<script>navigator.clipboard.writeText({});</script>".format(json.dumps(config.ui.install_command)),
            height=0,
        )
    if is_copy_acknowledged(st.session_state[STATE_KEY], time.time(), config.ui.copy_reset_seconds):
        st.success("Copied!")


def main() -> None:
    """Runs the Streamlit app lifecycle."""
    config = _load_config(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    st.set_page_config(page_title=config.ui.title, page_icon="∇", layout="wide")
    st.title(config.ui.title)

    settings = _render_sidebar(config)
    if STATE_KEY not in st.session_state:
        st.session_state[SETTINGS_KEY] = settings
        st.session_state[STATE_KEY] = build_initial_state(config.expression.default, _compute_fn(config, settings))
    elif st.session_state[SETTINGS_KEY] != settings:
        logger.info("sampling_settings_changed points=%s x_range=%s y_range=%s", settings.points, settings.x_range, settings.y_range)
        st.session_state[SETTINGS_KEY] = settings
        _dispatch(config, TextChanged(st.session_state[STATE_KEY].expression_text))

    st.text_input(
        "Enter function f(x,y) =",
        value=config.expression.default,
        key=INPUT_KEY,
        placeholder="e.g. x ** 2 + y ** 2",
        on_change=lambda: _dispatch(config, TextChanged(st.session_state[INPUT_KEY])),
    )

    state: ViewState = st.session_state[STATE_KEY]
    if state.error:
        st.error("Could not evaluate expression: {}".format(state.error))

    if state.bundle is None:
        st.info("Enter a valid expression to see its surface.")
    else:
        dx_label, dy_label = state.bundle.labels
        if dx_label and dy_label:
            st.markdown("∂f/∂x = `{}` &nbsp;&nbsp; ∂f/∂y = `{}`".format(dx_label, dy_label))
        st.plotly_chart(build_figure(state.bundle, config), use_container_width=True)

    _render_copy_block(config)


if __name__ == "__main__":
    main()
