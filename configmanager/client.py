"""
설정 조회 클라이언트

StateManager 위에 타입별 조회 헬퍼를 제공합니다.
사용자는 설정 파일 구조를 몰라도 키와 기본값만으로 값을 읽을 수 있습니다.

조회 규칙:
- 메모이제이션된 값이 기대 타입이면 그대로 반환
- 아니면 원본 JSON을 해석해 타입 검증 후 메모이제이션
- 실패 시 기본값 반환 (키 없음은 로깅하지 않음)

사용법:
    ```python
    client = new_client("/etc/configs", "storage-server")

    if client.is_feature_enabled("new_compaction", enabled_by_default=False):
        ...
    batch_size = client.get_int64("batch_size", 100)

    client.close()
    ```
"""

import json
import logging
import random
import threading
from typing import Any, Callable, Protocol

from pydantic import BaseModel, ValidationError

from .errors import ConfigManagerError, ErrorClassifier, UnmarshalMismatchError
from .logger import null_logger
from .model import (
    Config,
    DummyStateManager,
    NullStateManager,
    StateManager,
    new_state_manager,
)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

UnmarshalFn = Callable[[bytes], Any]


class RandomSource(Protocol):
    def random(self) -> float: ...


class ProjectWhitelist(frozenset):
    """프로젝트 ID 화이트리스트 (메모이제이션 값)"""


class TokenWhitelist(frozenset):
    """토큰 화이트리스트 (메모이제이션 값)"""


def _mismatch(expected: str, value: Any) -> UnmarshalMismatchError:
    return UnmarshalMismatchError(
        "값 타입 불일치", expected=expected, actual=type(value).__name__
    )


# JSON null은 오류가 아니라 각 타입의 0 값으로 해석
def _to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise _mismatch("bool", value)


def _to_int64(value: Any) -> int:
    if value is None:
        return 0
    # bool은 int의 하위 타입이므로 type()으로 비교
    if type(value) is int and INT64_MIN <= value <= INT64_MAX:
        return value
    raise _mismatch("int64", value)


def _to_float64(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise _mismatch("float64", value)


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise _mismatch("string", value)


def _to_byte(value: Any) -> int:
    if value is None:
        return 0
    if type(value) is int and 0 <= value <= 255:
        return value
    raise _mismatch("byte", value)


def _to_project_whitelist(value: Any) -> ProjectWhitelist:
    if value is None:
        return ProjectWhitelist()
    if not isinstance(value, dict):
        raise _mismatch("object", value)
    try:
        project_ids = [int(k) for k in value]
    except ValueError as e:
        raise UnmarshalMismatchError("프로젝트 ID가 정수가 아닙니다") from e
    if any(not INT64_MIN <= p <= INT64_MAX for p in project_ids):
        raise UnmarshalMismatchError("프로젝트 ID 범위 초과")
    return ProjectWhitelist(project_ids)


def _to_token_whitelist(value: Any) -> TokenWhitelist:
    if value is None:
        return TokenWhitelist()
    if not isinstance(value, dict):
        raise _mismatch("object", value)
    return TokenWhitelist(value)


class ConfigClient:
    """타입별 설정 조회 클라이언트 (스레드 안전)"""

    def __init__(
        self,
        state_manager: StateManager,
        logger: logging.Logger | None = None,
        unmarshal_fn: UnmarshalFn = json.loads,
        rng: RandomSource | None = None,
    ):
        """
        Args:
            state_manager: 설정 상태 관리자
            logger: 로거 (기본: 모듈 로거)
            unmarshal_fn: 원본 JSON 해석 함수
            rng: 기능 플래그용 난수 소스
        """
        self._sm = state_manager
        self._logger = logger or logging.getLogger(__name__)
        self._unmarshal_fn = unmarshal_fn
        self._rng: RandomSource = rng or random.Random()
        # 난수 소스는 동시 사용에 안전하다고 가정하지 않음
        self._rng_lock = threading.Lock()

    @property
    def state_manager(self) -> StateManager:
        return self._sm

    def close(self) -> None:
        """클라이언트 종료 (상태 관리자 종료)"""
        self._sm.close()

    def __enter__(self) -> "ConfigClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # 원본 값 조회
    # ------------------------------------------------------------------

    def get_raw(self, key: str) -> bytes:
        """원본 JSON 바이트 조회

        Raises:
            KeyNotFoundError: 키 없음
        """
        return self._sm.get_key(key).raw_value

    def unmarshal(self, key: str, model: type[BaseModel] | None = None) -> Any:
        """원본 JSON 해석

        모델 타입을 알 수 없으므로 결과를 메모이제이션하지 않고 매번 해석합니다.

        Args:
            key: 설정 키
            model: 검증할 pydantic 모델 (None이면 JSON 값 그대로 반환)

        Raises:
            KeyNotFoundError: 키 없음
            UnmarshalMismatchError: JSON 형식 오류 또는 모델 검증 실패
        """
        config = self._sm.get_key(key)
        value = self._decode(config)
        if model is None:
            return value
        try:
            return model.model_validate(value)
        except ValidationError as e:
            raise UnmarshalMismatchError(
                "모델 검증 실패", key=key, model=model.__name__
            ) from e

    def _decode(self, config: Config) -> Any:
        try:
            return self._unmarshal_fn(config.raw_value)
        except (ValueError, TypeError) as e:
            raise UnmarshalMismatchError("JSON 해석 실패", key=config.key) from e

    # ------------------------------------------------------------------
    # 타입별 조회
    # ------------------------------------------------------------------

    def _get_typed(
        self,
        key: str,
        is_memoized: Callable[[Any], bool],
        convert: Callable[[Any], Any],
    ) -> Any:
        config = self._sm.get_key(key)
        parsed = self._sm.get_parsed_value(config)
        if parsed is not None and is_memoized(parsed):
            return parsed

        value = convert(self._decode(config))
        self._sm.set_parsed_value(config, value)
        return value

    def _get_or_default(
        self,
        scope: str,
        key: str,
        default_val: Any,
        is_memoized: Callable[[Any], bool],
        convert: Callable[[Any], Any],
    ) -> Any:
        try:
            return self._get_typed(key, is_memoized, convert)
        except ConfigManagerError as e:
            self._log_get_error(scope, e, key, default_val)
            return default_val

    def _log_get_error(
        self, scope: str, error: ConfigManagerError, key: str, default_val: Any
    ) -> None:
        # 선택적 키 부재는 정상 흐름
        if ErrorClassifier.is_expected(error):
            return
        self._logger.getChild(scope).warning(
            f"[ConfigClient] 조회 실패, 기본값 사용: key={key}, "
            f"default={default_val!r}, error={error}"
        )

    def get_boolean(self, key: str, default_val: bool) -> bool:
        return self._get_or_default(
            "get_boolean", key, default_val, lambda v: type(v) is bool, _to_bool
        )

    def get_int64(self, key: str, default_val: int) -> int:
        return self._get_or_default(
            "get_int64", key, default_val, lambda v: type(v) is int, _to_int64
        )

    def get_float64(self, key: str, default_val: float) -> float:
        return self._get_or_default(
            "get_float64", key, default_val, lambda v: type(v) is float, _to_float64
        )

    def get_string(self, key: str, default_val: str) -> str:
        return self._get_or_default(
            "get_string", key, default_val, lambda v: type(v) is str, _to_string
        )

    def get_byte(self, key: str, default_val: int) -> int:
        return self._get_or_default(
            "get_byte",
            key,
            default_val,
            lambda v: type(v) is int and 0 <= v <= 255,
            _to_byte,
        )

    # ------------------------------------------------------------------
    # 화이트리스트 / 기능 플래그
    # ------------------------------------------------------------------

    def is_project_whitelisted(
        self, key: str, project_id: int, default_val: bool
    ) -> bool:
        """프로젝트 화이트리스트 포함 여부

        값 형식: {"<project_id>": {}, ...}
        """
        try:
            whitelist = self._get_typed(
                key,
                lambda v: isinstance(v, ProjectWhitelist),
                _to_project_whitelist,
            )
        except ConfigManagerError as e:
            self._log_get_error("is_project_whitelisted", e, key, default_val)
            return default_val
        return project_id in whitelist

    def is_token_whitelisted(self, key: str, token: str, default_val: bool) -> bool:
        """토큰 화이트리스트 포함 여부

        값 형식: {"<token>": {}, ...}
        """
        try:
            whitelist = self._get_typed(
                key,
                lambda v: isinstance(v, TokenWhitelist),
                _to_token_whitelist,
            )
        except ConfigManagerError as e:
            self._log_get_error("is_token_whitelisted", e, key, default_val)
            return default_val
        return token in whitelist

    def is_feature_enabled(self, key: str, enabled_by_default: bool) -> bool:
        """확률 기반 기능 플래그

        키 값(0.0~1.0)을 활성화 확률로 사용합니다.
        키가 없으면 enabled_by_default에 따라 확률 1.0 또는 0.0.
        """
        default_probability = 1.0 if enabled_by_default else 0.0
        probability = self.get_float64(key, default_probability)

        with self._rng_lock:
            draw = self._rng.random()
        return draw < probability


def new_client(
    dir_path: str,
    scope: str,
    logger: logging.Logger | None = None,
    load_timeout: float | None = None,
) -> ConfigClient:
    """스코프 설정 파일(`<dir_path>/<scope>/configs.json`)을 감시하는 클라이언트 생성

    첫 로드가 완료될 때까지 블로킹합니다.

    Raises:
        ConfigManagerError: 감시 시작 실패 또는 초기 로드 시간 초과
    """
    try:
        sm = new_state_manager(
            dir_path, scope, logger=logger, load_timeout=load_timeout
        )
    except ConfigManagerError as e:
        raise e.annotate(scope=scope, dir_path=dir_path)
    return ConfigClient(sm, logger=logger)


def new_null_client() -> ConfigClient:
    """항상 기본값을 반환하는 클라이언트"""
    return ConfigClient(NullStateManager(), logger=null_logger())


class TestClient(ConfigClient):
    """테스트 전용 클라이언트

    set_* 메서드로 값을 주입하면 get_* 메서드가 그대로 돌려줍니다.
    스레드 안전하지만 프로덕션에서 사용하지 마세요.
    """

    __test__ = False

    def __init__(self, logger: logging.Logger | None = None):
        self._dummy = DummyStateManager()
        super().__init__(self._dummy, logger=logger)

    def _set_value(self, key: str, value: Any) -> "TestClient":
        self._dummy.set_config(Config.from_value(key, value))
        return self

    def set_boolean(self, key: str, value: bool) -> "TestClient":
        return self._set_value(key, value)

    def set_int64(self, key: str, value: int) -> "TestClient":
        return self._set_value(key, value)

    def set_float64(self, key: str, value: float) -> "TestClient":
        return self._set_value(key, value)

    def set_string(self, key: str, value: str) -> "TestClient":
        return self._set_value(key, value)

    def set_byte(self, key: str, value: int) -> "TestClient":
        return self._set_value(key, value)

    def set_raw(self, key: str, raw: bytes) -> "TestClient":
        self._dummy.set_config(Config(key=key, raw_value=raw))
        return self

    def set_projects_whitelist(self, key: str, *project_ids: int) -> "TestClient":
        return self._set_value(key, {str(p): {} for p in project_ids})

    def set_tokens_whitelist(self, key: str, *tokens: str) -> "TestClient":
        return self._set_value(key, {t: {} for t in tokens})
