"""
API 응답 스키마 모듈
"""

from .response import (
    ConfigValueResponse,
    ErrorResponse,
    FeatureResponse,
    HealthResponse,
    WhitelistResponse,
)

__all__ = [
    "ConfigValueResponse",
    "ErrorResponse",
    "FeatureResponse",
    "HealthResponse",
    "WhitelistResponse",
]
