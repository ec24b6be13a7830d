"""
에러 분류 시스템

설정 로드/감시/조회 단계에서 발생하는 에러를 종류별로 구분합니다.
조회 단계의 KeyNotFoundError는 정상 흐름(선택적 키 부재)으로 간주해 로깅하지 않습니다.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """에러 종류"""

    PATH_NOT_FOUND = "path_not_found"  # 감시 대상 파일 없음 (시작 시 치명적)
    WATCH_REGISTRATION = "watch_registration_error"  # OS 감시 등록 실패
    READ = "read_error"  # 리로드 중 파일 읽기 실패
    PARSE = "parse_error"  # 리로드 중 JSON 파싱 실패
    NOT_FOUND = "not_found"  # 스냅샷에 키 없음
    UNMARSHAL_MISMATCH = "unmarshal_mismatch"  # 요청한 타입과 값 불일치
    LOAD_TIMEOUT = "load_timeout"  # 초기 로드 대기 시간 초과
    UNKNOWN = "unknown"


class ConfigManagerError(Exception):
    """configmanager 기본 에러"""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        kind: ErrorKind | None = None,
        **details: Any,
    ):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.details: dict[str, Any] = details

    def __str__(self) -> str:
        message = str(self.args[0]) if self.args else ""
        if not self.details:
            return message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{message} ({extra})"

    def annotate(self, **details: Any) -> "ConfigManagerError":
        """상세 정보 추가 후 자기 자신 반환 (재발생용)"""
        self.details.update(details)
        return self


class PathNotFoundError(ConfigManagerError):
    kind = ErrorKind.PATH_NOT_FOUND


class WatchRegistrationError(ConfigManagerError):
    kind = ErrorKind.WATCH_REGISTRATION


class ReadError(ConfigManagerError):
    kind = ErrorKind.READ


class ParseError(ConfigManagerError):
    kind = ErrorKind.PARSE


class KeyNotFoundError(ConfigManagerError, KeyError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: str):
        super().__init__("Config not found", key=key)
        self.key = key


class UnmarshalMismatchError(ConfigManagerError, ValueError):
    kind = ErrorKind.UNMARSHAL_MISMATCH


class LoadTimeoutError(ConfigManagerError):
    kind = ErrorKind.LOAD_TIMEOUT


class ErrorClassifier:
    """에러 분류기"""

    @classmethod
    def classify(cls, error: BaseException) -> ErrorKind:
        """에러 종류 반환

        cause 체인을 따라가며 가장 먼저 만나는 ConfigManagerError의 종류를 사용합니다.

        Args:
            error: 분류할 예외 객체

        Returns:
            ErrorKind: 에러 종류
        """
        current: BaseException | None = error
        while current is not None:
            if isinstance(current, ConfigManagerError):
                return current.kind
            current = current.__cause__
        return ErrorKind.UNKNOWN

    @classmethod
    def is_expected(cls, error: BaseException) -> bool:
        """로깅이 필요 없는 예상된 에러인지 확인 (키 부재)"""
        return cls.classify(error) == ErrorKind.NOT_FOUND

    @classmethod
    def format_message(
        cls, error: BaseException, include_traceback: bool = False
    ) -> str:
        """에러 메시지 포맷팅

        Args:
            error: 포맷팅할 예외 객체
            include_traceback: 상세 스택 트레이스 포함 여부

        Returns:
            str: 종류 라벨이 포함된 에러 메시지
        """
        kind = cls.classify(error)
        message = f"[{kind.value}] {type(error).__name__}: {error}"

        if include_traceback:
            import traceback

            trace = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            message += f"\n\n상세 정보:\n{trace}"

        return message
