"""
FastAPI 의존성 주입 모듈

설정 클라이언트와 서버 설정을 관리합니다.
"""

from configmanager import ConfigClient, NullStateManager, new_null_client

from .settings import ServerSettings

# ============================================================================
# 설정 클라이언트 의존성
# ============================================================================
_config_client: ConfigClient | None = None


def set_config_client(client: ConfigClient | None) -> None:
    """설정 클라이언트 설정 (앱 시작 시 호출)

    Args:
        client: ConfigClient 인스턴스 (None이면 해제)
    """
    global _config_client
    _config_client = client


def get_config_client() -> ConfigClient:
    """설정 클라이언트 의존성

    Returns:
        ConfigClient 인스턴스 (초기화 전이면 Null 클라이언트)
    """
    if _config_client is None:
        return new_null_client()
    return _config_client


def is_config_live() -> bool:
    """실제 설정 파일을 감시 중인지 여부"""
    return _config_client is not None and not isinstance(
        _config_client.state_manager, NullStateManager
    )


# ============================================================================
# 환경 설정 의존성
# ============================================================================
_settings: ServerSettings | None = None


def get_settings() -> ServerSettings:
    """서버 설정 의존성 (싱글톤)

    Returns:
        ServerSettings 인스턴스
    """
    global _settings
    if _settings is None:
        _settings = ServerSettings.from_env()
    return _settings


def set_settings(settings: ServerSettings | None) -> None:
    """서버 설정 교체 (테스트/CLI용)"""
    global _settings
    _settings = settings
