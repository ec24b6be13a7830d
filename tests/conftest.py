"""
Pytest 설정 및 공통 Fixture
"""

import queue
from pathlib import Path
from typing import Iterator

import pytest

from configmanager import FileStateManager, FileWatcher, debugvars
from tests.helpers import SCOPE, write_configs


@pytest.fixture(autouse=True)
def reset_debug_vars() -> Iterator[None]:
    """테스트마다 디버그 변수 레지스트리 초기화"""
    debugvars.clear()
    yield
    debugvars.clear()


@pytest.fixture
def config_root(tmp_path: Path) -> Path:
    """설정 루트 디렉토리 (스코프 하위 디렉토리 포함)"""
    (tmp_path / SCOPE).mkdir()
    return tmp_path


@pytest.fixture
def config_path(config_root: Path) -> Path:
    """스코프 설정 파일 경로 (초기 내용: foo=bar)"""
    path = config_root / SCOPE / "configs.json"
    write_configs(path, {"foo": "bar"})
    return path


@pytest.fixture
def update_queue() -> "queue.Queue[None]":
    """로드 완료 알림 큐"""
    return queue.Queue(maxsize=1)


@pytest.fixture
def state_manager(
    config_root: Path, config_path: Path, update_queue: "queue.Queue[None]"
) -> Iterator[FileStateManager]:
    """파일 감시 기반 상태 관리자 (notify_counter 포함)

    생성 직후 초기 로드 콜백 1회가 끝날 때까지 대기합니다.
    """
    sm = FileStateManager(
        str(config_root),
        SCOPE,
        update_queue=update_queue,
        watcher_factory=FileWatcher.for_test,
    )
    assert sm.watcher.notify_counter.wait(1, timeout=5)
    yield sm
    sm.close()
