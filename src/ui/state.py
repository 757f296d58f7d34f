"""View state and the pure reducer driving the surface page."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from src.pipeline.surface import SurfaceBundle
from src.tools.gradient import GradientError
from src.tools.utils import ExpressionError
from src.utils.logger import get_logger

logger = get_logger("ui.state")

ComputeFn = Callable[[str], SurfaceBundle]


@dataclass(frozen=True)
class ViewState:
    expression_text: str
    bundle: Optional[SurfaceBundle] = None
    error: Optional[str] = None
    copied_at: Optional[float] = None


@dataclass(frozen=True)
class TextChanged:
    text: str


@dataclass(frozen=True)
class CopyPressed:
    now: float


@dataclass(frozen=True)
class Tick:
    now: float


Event = Union[TextChanged, CopyPressed, Tick]


def reduce(state: ViewState, event: Event, compute: ComputeFn, copy_reset_seconds: float) -> ViewState:
    """Returns the next view state for one event.

    Args:
        state: Current state.
        event: Incoming UI event.
        compute: Builds the surface bundle for an expression text.
        copy_reset_seconds: Delay before the copy acknowledgement clears.

    Returns:
        New state; ``state`` itself is never mutated.
    """
    if isinstance(event, TextChanged):
        return _on_text_changed(state, event.text, compute)
    if isinstance(event, CopyPressed):
        return replace(state, copied_at=event.now)
    if isinstance(event, Tick):
        if state.copied_at is not None and event.now - state.copied_at >= copy_reset_seconds:
            return replace(state, copied_at=None)
        return state
    raise TypeError("Unknown event: {}".format(type(event).__name__))


def _on_text_changed(state: ViewState, text: str, compute: ComputeFn) -> ViewState:
    try:
        bundle = compute(text)
    except (ExpressionError, GradientError) as exc:
        logger.warning("expression_rejected text=%r error=%s", text, exc)
        # previous surfaces stay on screen next to the message
        return replace(state, expression_text=text, error=str(exc))
    return replace(state, expression_text=text, bundle=bundle, error=None)


def is_copy_acknowledged(state: ViewState, now: float, copy_reset_seconds: float) -> bool:
    return state.copied_at is not None and now - state.copied_at < copy_reset_seconds


def build_initial_state(text: str, compute: ComputeFn) -> ViewState:
    return reduce(ViewState(expression_text=text), TextChanged(text), compute, copy_reset_seconds=0.0)
