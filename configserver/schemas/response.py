"""
API 응답 스키마 정의

설정 값, 화이트리스트, 기능 플래그 조회 결과를 반환하는 Pydantic 모델입니다.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConfigValueResponse(BaseModel):
    """설정 값 조회 응답

    GET /config 응답으로 반환됩니다.
    """

    key: str = Field(..., description="설정 키")
    value: Any = Field(default=None, description="해석된 JSON 값")
    raw: str = Field(..., description="원본 JSON 문자열")

    model_config = {
        "json_schema_extra": {
            "example": {
                "key": "batch_size",
                "value": 100,
                "raw": "100",
            }
        }
    }


class WhitelistResponse(BaseModel):
    """프로젝트 화이트리스트 조회 응답

    GET /whitelist 응답으로 반환됩니다.
    """

    key: str = Field(..., description="설정 키")
    project_id: int = Field(..., description="프로젝트 ID")
    whitelisted: bool = Field(..., description="화이트리스트 포함 여부")


class FeatureResponse(BaseModel):
    """기능 플래그 평가 응답

    GET /feature 응답으로 반환됩니다.
    """

    key: str = Field(..., description="기능 플래그 키")
    enabled: bool = Field(..., description="이번 평가 결과")


class ErrorResponse(BaseModel):
    """API 에러 응답"""

    error: str = Field(..., description="에러 코드")
    message: str = Field(..., description="에러 메시지")
    details: dict[str, Any] | None = Field(
        default=None,
        description="상세 에러 정보",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "CONFIG_NOT_FOUND",
                "message": "Config 'batch_size' not found",
                "details": {"key": "batch_size"},
            }
        }
    }


class HealthResponse(BaseModel):
    """헬스체크 응답

    GET /health 응답으로 반환됩니다.
    """

    status: str = Field(default="ok", description="서버 상태")
    version: str = Field(..., description="API 버전")
    scope: str = Field(..., description="감시 중인 설정 스코프")
    config: str = Field(default="unknown", description="설정 감시 상태 (live/null)")
    uptime_seconds: int = Field(default=0, description="서버 가동 시간 (초)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "ok",
                "version": "1.0.0",
                "scope": "configsample",
                "config": "live",
                "uptime_seconds": 3600,
            }
        }
    }
