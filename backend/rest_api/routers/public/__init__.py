"""
Public routers - No authentication required.
- /api/public/* - Public menu endpoints
- /api/health - Health check
"""

from .menus import router as menus_router
from .health import router as health_router

__all__ = ["menus_router", "health_router"]
