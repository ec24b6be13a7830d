"""
디버그 변수 API 라우터
"""

from typing import Any

from fastapi import APIRouter

from configmanager import debugvars

router = APIRouter(prefix="/debug", tags=["Debug"])


@router.get(
    "/vars",
    summary="디버그 변수 조회",
    description="공개된 디버그 변수 전체를 반환합니다. 스코프별 설정 원본 값이 포함됩니다.",
)
async def get_debug_vars() -> dict[str, dict[str, Any]]:
    return debugvars.all_vars()
