"""
읽기/쓰기 락

다수의 조회(공유 모드)와 드문 스냅샷 교체/메모이제이션 기록(배타 모드)을 위한 락.
대기 중인 writer가 있으면 새 reader를 막아 리로드가 굶지 않도록 합니다.
재진입은 지원하지 않습니다.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class RWLock:
    """쓰기 우선 읽기/쓰기 락"""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            self._cond.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """공유 모드 컨텍스트"""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """배타 모드 컨텍스트"""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
