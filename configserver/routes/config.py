"""
설정 조회 API 라우터

설정 값, 프로젝트 화이트리스트, 기능 플래그를 조회합니다.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from configmanager import ConfigClient, KeyNotFoundError, UnmarshalMismatchError

from ..dependencies import get_config_client
from ..schemas.response import (
    ConfigValueResponse,
    ErrorResponse,
    FeatureResponse,
    WhitelistResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Config"])


@router.get(
    "/config",
    response_model=ConfigValueResponse,
    responses={404: {"model": ErrorResponse}},
    summary="설정 값 조회",
    description="키에 해당하는 현재 설정 값을 원본 JSON과 함께 반환합니다.",
)
async def get_config(
    key: str = Query(..., min_length=1, description="설정 키"),
    client: ConfigClient = Depends(get_config_client),
) -> ConfigValueResponse:
    """설정 값 조회

    Args:
        key: 설정 키

    Returns:
        ConfigValueResponse: 해석된 값과 원본 JSON
    """
    try:
        raw = client.get_raw(key)
        value = client.unmarshal(key)
    except KeyNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "CONFIG_NOT_FOUND",
                "message": f"Config '{key}' not found",
            },
        )
    except UnmarshalMismatchError as e:
        logger.warning(f"[Server] 설정 값 해석 실패: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "CONFIG_INVALID",
                "message": f"Config '{key}' is not valid JSON",
            },
        )

    return ConfigValueResponse(
        key=key,
        value=value,
        raw=raw.decode("utf-8", errors="replace"),
    )


@router.get(
    "/whitelist",
    response_model=WhitelistResponse,
    summary="프로젝트 화이트리스트 확인",
    description="프로젝트 ID가 화이트리스트 키에 포함되는지 확인합니다. 키가 없거나 형식이 잘못되면 false.",
)
async def check_whitelist(
    key: str = Query(..., min_length=1, description="화이트리스트 키"),
    project_id: int = Query(..., description="프로젝트 ID"),
    client: ConfigClient = Depends(get_config_client),
) -> WhitelistResponse:
    """프로젝트 화이트리스트 확인"""
    return WhitelistResponse(
        key=key,
        project_id=project_id,
        whitelisted=client.is_project_whitelisted(key, project_id, False),
    )


@router.get(
    "/feature",
    response_model=FeatureResponse,
    summary="기능 플래그 평가",
    description="키 값을 확률로 사용해 기능 활성화 여부를 한 번 평가합니다.",
)
async def evaluate_feature(
    key: str = Query(..., min_length=1, description="기능 플래그 키"),
    enabled_by_default: bool = Query(False, description="키가 없을 때 활성화 여부"),
    client: ConfigClient = Depends(get_config_client),
) -> FeatureResponse:
    return FeatureResponse(
        key=key,
        enabled=client.is_feature_enabled(key, enabled_by_default),
    )
