"""
샘플 서버 설정

환경변수 기반 설정 관리.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """설정 오류 예외"""

    pass


@dataclass
class ServerSettings:
    """서버 설정"""

    env: str = "dev"

    # API 서버
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # 감시할 설정 파일: <config_dir>/<config_scope>/configs.json
    config_dir: str = "/etc/configs"
    config_scope: str = "configsample"
    load_timeout: float | None = None  # 초, None이면 첫 로드까지 무한 대기

    log_level: str = "INFO"

    @property
    def debug(self) -> bool:
        return self.env == "dev"

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """환경변수에서 설정 로드"""
        load_timeout_str = os.getenv("CONFIG_LOAD_TIMEOUT", "")

        return cls(
            env=os.getenv("ENV", "dev"),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
            config_dir=os.getenv("CONFIG_DIR", "/etc/configs"),
            config_scope=os.getenv("CONFIG_SCOPE", "configsample"),
            load_timeout=float(load_timeout_str) if load_timeout_str else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self, strict: bool = True) -> list[str]:
        """설정값 검증

        Args:
            strict: True면 오류 시 예외 발생, False면 로깅만

        Returns:
            list[str]: 검증 경고/오류 메시지 목록

        Raises:
            ConfigurationError: strict=True이고 오류가 있을 때
        """
        errors = []
        warnings = []

        if not self.config_scope:
            errors.append("필수 환경변수 누락: CONFIG_SCOPE")
        elif "/" in self.config_scope or self.config_scope in (".", ".."):
            errors.append(f"잘못된 CONFIG_SCOPE 형식: {self.config_scope}")

        if not 0 < self.api_port < 65536:
            errors.append(f"잘못된 API_PORT 값: {self.api_port}")

        if self.load_timeout is not None and self.load_timeout <= 0:
            errors.append(f"잘못된 CONFIG_LOAD_TIMEOUT 값: {self.load_timeout}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            warnings.append(f"알 수 없는 LOG_LEVEL: {self.log_level}")

        # 설정 파일은 나중에 생성될 수 있으므로 경고만
        config_file = Path(self.config_dir) / self.config_scope / "configs.json"
        if self.config_scope and not config_file.exists():
            warnings.append(f"설정 파일 없음: {config_file}")

        for warning in warnings:
            logger.warning(f"[Settings] {warning}")

        if errors:
            for error in errors:
                logger.error(f"[Settings] {error}")
            if strict:
                raise ConfigurationError(
                    f"설정 검증 실패: {len(errors)}개 오류\n" + "\n".join(errors)
                )

        return errors + warnings
