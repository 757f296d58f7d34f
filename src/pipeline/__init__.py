"""Surface bundle pipeline."""

from .surface import SamplingSettings, SurfaceBundle, compute_surface_bundle

__all__ = ["SamplingSettings", "SurfaceBundle", "compute_surface_bundle"]
