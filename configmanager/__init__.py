"""
configmanager 라이브러리

JSON 설정 파일 감시, 원자적 스냅샷 교체, 타입별 조회 헬퍼 제공.
"""

from . import debugvars
from .call_counter import CallCounter
from .client import (
    ConfigClient,
    ProjectWhitelist,
    TestClient,
    TokenWhitelist,
    new_client,
    new_null_client,
)
from .errors import (
    ConfigManagerError,
    ErrorClassifier,
    ErrorKind,
    KeyNotFoundError,
    LoadTimeoutError,
    ParseError,
    PathNotFoundError,
    ReadError,
    UnmarshalMismatchError,
    WatchRegistrationError,
)
from .logger import get_logger, null_logger
from .model import (
    CONFIG_FILE_NAME,
    Config,
    DummyStateManager,
    FileStateManager,
    NullStateManager,
    Snapshot,
    StateManager,
    config_file_path,
    new_state_manager,
)
from .types import FileOp, WatchEvent
from .watcher import FileWatcher

__all__ = [
    # Client
    "ConfigClient",
    "TestClient",
    "ProjectWhitelist",
    "TokenWhitelist",
    "new_client",
    "new_null_client",
    # Errors
    "ConfigManagerError",
    "ErrorClassifier",
    "ErrorKind",
    "KeyNotFoundError",
    "LoadTimeoutError",
    "ParseError",
    "PathNotFoundError",
    "ReadError",
    "UnmarshalMismatchError",
    "WatchRegistrationError",
    # State
    "CONFIG_FILE_NAME",
    "Config",
    "Snapshot",
    "StateManager",
    "FileStateManager",
    "NullStateManager",
    "DummyStateManager",
    "config_file_path",
    "new_state_manager",
    "debugvars",
    # Watcher
    "FileWatcher",
    "FileOp",
    "WatchEvent",
    "CallCounter",
    # Logging
    "get_logger",
    "null_logger",
]
