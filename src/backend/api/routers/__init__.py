"""
API routers package.
"""

from api.routers.analyst import router as analyst_router
from api.routers.bridge import router as bridge_router
from api.routers.dashboard import router as dashboard_router

__all__ = ["analyst_router", "bridge_router", "dashboard_router"]
