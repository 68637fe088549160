from .segments import build_segment_routes
from .settings import build_settings_routes

__all__ = ["build_segment_routes", "build_settings_routes"]
