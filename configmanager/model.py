"""
설정 스냅샷 및 상태 관리자

설정 파일(JSON 배열)을 불변 스냅샷으로 파싱하고, 파일 변경 시 원자적으로 교체합니다.

설계 원칙:
- 생성자는 첫 스냅샷이 게시될 때까지 블로킹
- 조회는 항상 완성된 스냅샷만 관찰 (교체는 배타 락 아래에서 참조만 바꿈)
- 리로드 실패 시 이전 스냅샷 유지 (fail open)
- Config의 parsed_value만 예외적으로 변경 가능 (지연 메모이제이션)

설정 파일 형식 (`<dir_path>/<scope>/configs.json`):
    ```json
    [
        {"key": "feature.enabled", "value": true},
        {"key": "max_items", "value": 100}
    ]
    ```

사용법:
    ```python
    sm = new_state_manager("/etc/configs", "sample")
    config = sm.get_key("max_items")
    print(config.raw_value)  # b"100"
    sm.close()
    ```
"""

import json
import logging
import os
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from . import debugvars
from .errors import (
    ConfigManagerError,
    KeyNotFoundError,
    LoadTimeoutError,
    ParseError,
    ReadError,
)
from .rwlock import RWLock
from .watcher import FileWatcher

CONFIG_FILE_NAME = "configs.json"

WatcherFactory = Callable[..., FileWatcher]


def config_file_path(dir_path: str, scope: str) -> str:
    """스코프의 설정 파일 경로"""
    return os.path.join(dir_path, scope, CONFIG_FILE_NAME)


def encode_value(value: Any) -> bytes:
    """값을 압축 JSON 바이트로 인코딩

    Raises:
        ValueError: NaN/Infinity 등 JSON으로 표현할 수 없는 값
    """
    return json.dumps(
        value, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def _reject_constant(name: str) -> Any:
    # json.loads는 NaN, Infinity, -Infinity를 허용하지만 JSON 표준이 아님
    raise ValueError(f"허용되지 않는 JSON 상수: {name}")


@dataclass(eq=False)
class Config:
    """설정 항목

    raw_value는 생성 후 변경하지 않습니다.
    parsed_value는 접근자가 raw_value를 처음 해석할 때 기록하는 메모이제이션 슬롯이며,
    소유 StateManager의 락을 통해서만 읽고 씁니다. None은 미기록을 의미합니다.
    """

    key: str
    raw_value: bytes
    parsed_value: Any = field(default=None, repr=False)

    def __post_init__(self):
        if isinstance(self.raw_value, str):
            self.raw_value = self.raw_value.encode("utf-8")

    def __str__(self) -> str:
        return self.raw_value.decode("utf-8", errors="replace")

    @classmethod
    def from_value(cls, key: str, value: Any) -> "Config":
        return cls(key=key, raw_value=encode_value(value))


class Snapshot:
    """불변 설정 스냅샷

    Config 목록과 키 인덱스로 구성됩니다. 중복 키는 파일에서 나중에 나온 항목이 우선합니다.
    """

    __slots__ = ("_configs", "_index")

    def __init__(self, configs: Iterable[Config] = ()):
        self._configs: tuple[Config, ...] = tuple(configs)
        self._index: dict[str, Config] = {}
        for config in self._configs:
            self._index[config.key] = config

    @classmethod
    def from_json(cls, data: bytes | str, path: str | None = None) -> "Snapshot":
        """JSON 배열 파싱

        Args:
            data: 설정 파일 내용
            path: 에러 메시지용 파일 경로

        Returns:
            Snapshot

        Raises:
            ParseError: JSON 형식 오류 또는 레코드 형식 오류
        """
        try:
            records = json.loads(data, parse_constant=_reject_constant)
        except ValueError as e:
            raise ParseError("설정 JSON 파싱 실패", path=path) from e

        if records is None:
            return cls()
        if not isinstance(records, list):
            raise ParseError(
                "설정 파일 최상위는 배열이어야 합니다",
                path=path,
                type=type(records).__name__,
            )

        configs = []
        for i, record in enumerate(records):
            if not isinstance(record, dict) or not isinstance(record.get("key"), str):
                raise ParseError("잘못된 설정 레코드", path=path, index=i)
            try:
                configs.append(Config.from_value(record["key"], record.get("value")))
            except ValueError as e:
                # 1e400처럼 범위를 넘는 숫자는 inf로 해석됨
                raise ParseError(
                    "JSON으로 표현할 수 없는 값", path=path, key=record["key"]
                ) from e
        return cls(configs)

    @property
    def configs(self) -> tuple[Config, ...]:
        return self._configs

    def get(self, key: str) -> Config:
        """키 조회

        Raises:
            KeyNotFoundError: 키 없음
        """
        config = self._index.get(key)
        if config is None:
            raise KeyNotFoundError(key)
        return config

    def keys(self) -> list[str]:
        return list(self._index)

    def items(self) -> Iterator[tuple[str, Config]]:
        return iter(self._index.items())

    def with_config(self, config: Config) -> "Snapshot":
        """항목을 추가(덮어쓰기)한 새 스냅샷"""
        return Snapshot(self._configs + (config,))

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Snapshot(keys={self.keys()!r})"


class StateManager(ABC):
    """설정 상태 관리자 인터페이스

    구현체: FileStateManager (파일 감시), NullStateManager (항상 빈 상태),
    DummyStateManager (테스트용 인메모리).
    """

    @abstractmethod
    def get_key(self, key: str) -> Config:
        """현재 스냅샷에서 키 조회

        Raises:
            KeyNotFoundError: 키 없음
        """

    @abstractmethod
    def get_parsed_value(self, config: Config) -> Any:
        """메모이제이션된 값 조회 (없으면 None)"""

    @abstractmethod
    def set_parsed_value(self, config: Config, value: Any) -> None:
        """메모이제이션 값 기록"""

    @abstractmethod
    def close(self) -> None:
        """리소스 정리 (멱등)"""

    def __enter__(self) -> "StateManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class NullStateManager(StateManager):
    """모든 조회가 KeyNotFoundError인 상태 관리자"""

    def get_key(self, key: str) -> Config:
        raise KeyNotFoundError(key)

    def get_parsed_value(self, config: Config) -> Any:
        return None

    def set_parsed_value(self, config: Config, value: Any) -> None:
        pass

    def close(self) -> None:
        pass


class DummyStateManager(StateManager):
    """테스트용 인메모리 상태 관리자

    파일 시스템 없이 set_config()로 항목을 직접 주입합니다. 프로덕션에서 사용하지 마세요.
    """

    def __init__(self, snapshot: Snapshot | None = None):
        self._lock = RWLock()
        self._snapshot = snapshot if snapshot is not None else Snapshot()

    def set_config(self, config: Config) -> "DummyStateManager":
        with self._lock.write_locked():
            self._snapshot = self._snapshot.with_config(config)
        return self

    def get_key(self, key: str) -> Config:
        with self._lock.read_locked():
            return self._snapshot.get(key)

    def get_parsed_value(self, config: Config) -> Any:
        with self._lock.read_locked():
            return config.parsed_value

    def set_parsed_value(self, config: Config, value: Any) -> None:
        with self._lock.write_locked():
            config.parsed_value = value

    def close(self) -> None:
        pass


class FileStateManager(StateManager):
    """파일 감시 기반 상태 관리자

    생성 시 감시를 시작하고 첫 로드가 완료될 때까지 블로킹합니다.
    첫 로드가 실패하면 이후 올바른 파일 쓰기가 감지될 때까지 계속 대기합니다
    (load_timeout 지정 시 LoadTimeoutError).
    """

    def __init__(
        self,
        dir_path: str,
        scope: str,
        update_queue: "queue.Queue[Any] | None" = None,
        logger: logging.Logger | None = None,
        load_timeout: float | None = None,
        watcher_factory: WatcherFactory = FileWatcher,
    ):
        """
        Args:
            dir_path: 설정 루트 디렉토리
            scope: 설정 스코프 (하위 디렉토리 이름)
            update_queue: 로드 완료 알림 큐 (대기 중인 알림이 있으면 새 알림은 버림)
            logger: 로거 (기본: 모듈 로거)
            load_timeout: 첫 로드 최대 대기 시간 (초), None이면 무한 대기
            watcher_factory: FileWatcher 생성 함수 (테스트 시 FileWatcher.for_test)

        Raises:
            PathNotFoundError: 설정 파일 없음
            WatchRegistrationError: 감시 등록 실패
            LoadTimeoutError: load_timeout 내 첫 로드 실패
        """
        self.scope = scope
        self.file_path = config_file_path(dir_path, scope)
        self._logger = (logger or logging.getLogger(__name__)).getChild(
            "state_manager"
        )

        self._lock = RWLock()
        self._loaded = threading.Condition()
        self._snapshot: Snapshot | None = None
        self._updates = update_queue

        self.watcher: FileWatcher | None = watcher_factory(
            self.file_path, self.load_config, logger=self._logger
        )
        self._start(load_timeout)

    def _start(self, load_timeout: float | None) -> None:
        watcher = self.watcher
        try:
            watcher.start()
        except ConfigManagerError as e:
            self.watcher = None
            raise e.annotate(path=self.file_path)

        # 첫 load_config 완료 대기 (성공/실패 모두 broadcast, 스냅샷이 생길 때까지 재대기)
        with self._loaded:
            loaded = self._loaded.wait_for(
                lambda: self._snapshot is not None, timeout=load_timeout
            )

        if not loaded:
            self.close()
            raise LoadTimeoutError(
                "초기 설정 로드 대기 시간 초과",
                path=self.file_path,
                timeout=load_timeout,
            )

        self._logger.info(f"[StateManager] 초기화 완료: scope={self.scope}")

    @property
    def snapshot(self) -> Snapshot | None:
        """현재 스냅샷"""
        with self._lock.read_locked():
            return self._snapshot

    def load_config(self, file_path: str) -> None:
        """설정 파일 읽기 → 파싱 → 스냅샷 교체 (FileWatcher 콜백)

        Raises:
            ReadError: 파일 읽기 실패 (스냅샷 유지)
            ParseError: JSON 형식 오류 (스냅샷 유지)
        """
        try:
            try:
                with open(file_path, "rb") as f:
                    data = f.read()
            except OSError as e:
                raise ReadError("설정 파일 읽기 실패", path=file_path) from e

            self._load_snapshot(Snapshot.from_json(data, path=file_path))
        finally:
            with self._loaded:
                self._loaded.notify_all()

    def _load_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock.write_locked():
            self._snapshot = snapshot

        self._notify()
        debugvars.publish(f"configmanager.{self.scope}").replace(
            {key: str(config) for key, config in snapshot.items()}
        )

        self._logger.info(
            f"[StateManager] 설정 로드 완료: scope={self.scope}, {len(snapshot)}개 키"
        )

    def _notify(self) -> None:
        """로드 완료 알림

        대기 중인 알림은 최대 1개. 수신자가 아직 가져가지 않았으면 새 알림은 버립니다.
        """
        if self._updates is None or not self._updates.empty():
            return
        try:
            self._updates.put_nowait(None)
        except queue.Full:
            pass

    def get_key(self, key: str) -> Config:
        with self._lock.read_locked():
            if self._snapshot is None:
                raise KeyNotFoundError(key)
            return self._snapshot.get(key)

    def get_parsed_value(self, config: Config) -> Any:
        with self._lock.read_locked():
            return config.parsed_value

    def set_parsed_value(self, config: Config, value: Any) -> None:
        with self._lock.write_locked():
            config.parsed_value = value

    def close(self) -> None:
        watcher, self.watcher = self.watcher, None
        if watcher is not None:
            watcher.stop()


def new_state_manager(
    dir_path: str,
    scope: str,
    update_queue: "queue.Queue[Any] | None" = None,
    logger: logging.Logger | None = None,
    load_timeout: float | None = None,
) -> StateManager:
    """파일 감시 기반 상태 관리자 생성 (첫 로드까지 블로킹)"""
    return FileStateManager(
        dir_path,
        scope,
        update_queue=update_queue,
        logger=logger,
        load_timeout=load_timeout,
    )

