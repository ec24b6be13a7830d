"""
공용 타입 정의

파일 감시 이벤트 관련 Enum, Dataclass.
"""

from dataclasses import dataclass
from enum import Enum

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)


class FileOp(str, Enum):
    """파일 이벤트 종류"""

    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    CHMOD = "chmod"  # Linux watchdog은 속성 변경을 modified로 전달
    OTHER = "other"

    @classmethod
    def from_event_type(cls, event_type: str) -> "FileOp":
        """watchdog 이벤트 타입 → FileOp 변환"""
        return _EVENT_TYPE_OPS.get(event_type, cls.OTHER)

    @property
    def invalidates_watch(self) -> bool:
        """기존 감시 핸들을 무효화하는 이벤트인지 여부"""
        return self in (FileOp.REMOVE, FileOp.RENAME, FileOp.CHMOD)


_EVENT_TYPE_OPS = {
    EVENT_TYPE_CREATED: FileOp.CREATE,
    EVENT_TYPE_MODIFIED: FileOp.WRITE,
    EVENT_TYPE_DELETED: FileOp.REMOVE,
    EVENT_TYPE_MOVED: FileOp.RENAME,
}


@dataclass(frozen=True)
class WatchEvent:
    """감시 루프로 전달되는 파일 이벤트"""

    path: str
    op: FileOp
    is_directory: bool = False
