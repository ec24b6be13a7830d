"""
API 라우터 모듈
"""

from .config import router as config_router
from .debug import router as debug_router
from .health import router as health_router

__all__ = ["config_router", "health_router", "debug_router"]
