"""
헬스체크 API 라우터

서버 상태와 설정 감시 상태를 반환합니다.
"""

import time

from fastapi import APIRouter, Depends

from ..dependencies import get_settings, is_config_live
from ..schemas.response import HealthResponse
from ..settings import ServerSettings

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"

# 서버 시작 시각
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="헬스체크",
    description="서버 상태 및 설정 파일 감시 상태를 반환합니다.",
)
async def health_check(
    settings: ServerSettings = Depends(get_settings),
) -> HealthResponse:
    """서버 헬스체크

    Returns:
        HealthResponse: 서버 상태 정보
    """
    uptime = int(time.time() - _start_time)

    return HealthResponse(
        status="ok",
        version=API_VERSION,
        scope=settings.config_scope,
        config="live" if is_config_live() else "null",
        uptime_seconds=uptime,
    )


@router.get(
    "/health/live",
    summary="Liveness 체크",
    description="서버가 살아있는지 확인합니다. (Kubernetes liveness probe용)",
)
async def liveness() -> dict[str, str]:
    """Liveness 체크 (경량)"""
    return {"status": "ok"}


@router.get(
    "/health/ready",
    summary="Readiness 체크",
    description="설정 파일을 감시 중인지 확인합니다. (Kubernetes readiness probe용)",
)
async def readiness() -> dict[str, str]:
    """Readiness 체크

    Null 클라이언트로 동작 중이면 not_ready 반환
    """
    if is_config_live():
        return {"status": "ready"}
    return {"status": "not_ready", "error": "config client not initialized"}
