"""REST interface computing surface bundles as JSON."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from src.pipeline.surface import SamplingSettings, compute_surface_bundle
from src.tools.gradient import GradientError, GradientProvider, SymbolicGradient
from src.tools.plotter import build_layout, build_surface_traces
from src.tools.utils import ExpressionError
from src.utils.config_loader import AppConfig
from src.utils.logger import get_logger

logger = get_logger("api")


class SurfaceRequest(BaseModel):
    expression: str = Field(description="Expression f(x, y), e.g. 'x^2 + y^2'")
    x_range: Optional[List[float]] = Field(default=None, min_length=2, max_length=2, description="[min, max] of x")
    y_range: Optional[List[float]] = Field(default=None, min_length=2, max_length=2, description="[min, max] of y")
    points: Optional[int] = Field(default=None, description="Samples per axis")
    include_traces: bool = Field(default=False, description="Also return Plotly traces and layout")


class SurfaceResponse(BaseModel):
    expression: str
    derivatives: Dict[str, Optional[str]]
    points: int
    x_range: List[float]
    y_range: List[float]
    value: Dict[str, Any]
    grad_x: Dict[str, Any]
    grad_y: Dict[str, Any]
    traces: Optional[List[Dict[str, Any]]] = None
    layout: Optional[Dict[str, Any]] = None


def _resolve_settings(payload: SurfaceRequest, config: AppConfig) -> SamplingSettings:
    points = config.domain.points if payload.points is None else int(payload.points)
    if points < 2 or points > config.api.max_points:
        raise HTTPException(status_code=400, detail="points must be between 2 and {}".format(config.api.max_points))

    x_range = tuple(payload.x_range) if payload.x_range is not None else tuple(config.domain.x_range)
    y_range = tuple(payload.y_range) if payload.y_range is not None else tuple(config.domain.y_range)
    for name, bounds in (("x_range", x_range), ("y_range", y_range)):
        if not (math.isfinite(bounds[0]) and math.isfinite(bounds[1])) or not bounds[0] < bounds[1]:
            raise HTTPException(status_code=400, detail="{} must be finite with minimum smaller than maximum".format(name))
    return SamplingSettings(x_range=x_range, y_range=y_range, points=points)  # type: ignore[arg-type]


def create_app(config: Optional[AppConfig] = None, gradient_provider: Optional[GradientProvider] = None) -> FastAPI:
    """Builds and configures the FastAPI application.

    Args:
        config: Application settings; built-in defaults when omitted.
        gradient_provider: Differentiation backend; SymPy when omitted.

    Returns:
        Configured FastAPI app instance.
    """
    config = config or AppConfig()
    provider = gradient_provider or SymbolicGradient(simplify=config.expression.simplify_derivatives)
    app = FastAPI(title="Gradient Surface Lab API", version=config.version)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/defaults")
    def defaults() -> Dict[str, Any]:
        return {
            "expression": config.expression.default,
            "x_range": list(config.domain.x_range),
            "y_range": list(config.domain.y_range),
            "points": config.domain.points,
            "max_points": config.api.max_points,
        }

    @app.post("/surface", response_model=SurfaceResponse)
    def surface(payload: SurfaceRequest) -> Dict[str, Any]:
        settings = _resolve_settings(payload, config)
        try:
            bundle = compute_surface_bundle(
                payload.expression,
                settings=settings,
                gradient_provider=provider,
                max_length=config.expression.max_length,
                blocked_patterns=config.expression.blocked_patterns,
            )
        except (ExpressionError, GradientError) as exc:
            logger.warning("surface_rejected expression=%r error=%s", payload.expression, exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        response = bundle.to_dict()
        response.update(
            {
                "points": settings.points,
                "x_range": list(settings.x_range),
                "y_range": list(settings.y_range),
            }
        )
        if payload.include_traces:
            traces = build_surface_traces(bundle, config.surfaces)
            for trace, key in zip(traces, ("value", "grad_x", "grad_y")):
                trace.update(response[key])
            response["traces"] = traces
            response["layout"] = build_layout(config.layout)
        return response

    return app
