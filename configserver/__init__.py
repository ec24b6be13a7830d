"""
configmanager 샘플 HTTP 서버

FastAPI 기반으로 감시 중인 설정 값을 조회할 수 있습니다.
"""

from .server import app, create_app

__all__ = ["app", "create_app"]
