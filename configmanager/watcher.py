"""
단일 설정 파일 감시기

watchdog 라이브러리로 설정 파일 하나의 변경을 감지하고 콜백을 호출합니다.

설계 원칙:
- 시작 시 1회 강제 호출 (이벤트가 전혀 발생하지 않아도 설정 로드 보장)
- 콜백 실패는 로깅만 하고 감시는 계속 (fail open)
- rename/remove/chmod 시 감시를 재등록 (편집기의 rename 기반 저장 대응)

사용법:
    ```python
    def on_file_event(path: str) -> None:
        ...  # 실패 시 예외 발생

    watcher = FileWatcher("/etc/configs/sample/configs.json", on_file_event)
    watcher.start()

    # 앱 종료 시
    watcher.stop()
    ```
"""

import logging
import os
import queue
import threading
from typing import Any, Callable

from watchdog.events import EVENT_TYPE_MOVED, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from .call_counter import CallCounter
from .errors import PathNotFoundError, WatchRegistrationError
from .types import FileOp, WatchEvent

OnFileEvent = Callable[[str], None]

# 감시 루프 종료 신호
_CLOSED = object()


class _EventForwarder(FileSystemEventHandler):
    """watchdog 이벤트를 감시 루프 큐로 전달

    observer 스레드에서 호출되므로 큐 적재 외 작업은 하지 않습니다.
    """

    def __init__(self, events: "queue.Queue[Any]", watch_dir: str):
        super().__init__()
        self._events = events
        self._watch_dir = watch_dir

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            op = FileOp.from_event_type(event.event_type)
            paths = [event.src_path]
            if event.event_type == EVENT_TYPE_MOVED:
                paths.append(event.dest_path)

            for raw_path in paths:
                path = os.path.normpath(os.fsdecode(raw_path))
                if event.is_directory and op == FileOp.REMOVE and path == self._watch_dir:
                    self._events.put(
                        WatchRegistrationError("감시 디렉토리 삭제됨", path=path)
                    )
                    continue
                self._events.put(WatchEvent(path, op, event.is_directory))
        except Exception as e:
            self._events.put(e)


class FileWatcher:
    """파일 시스템 감시 기반 설정 파일 변경 감지

    watchdog은 디렉토리 단위로 감시하므로 부모 디렉토리를 감시하고
    대상 파일 경로의 이벤트만 처리합니다.
    """

    def __init__(
        self,
        path: str,
        on_file_event: OnFileEvent,
        logger: logging.Logger | None = None,
    ):
        """
        Args:
            path: 감시할 설정 파일 경로
            on_file_event: 변경 시 호출할 콜백 (실패 시 예외 발생)
            logger: 로거 (기본: 모듈 로거)
        """
        self.path = path
        self._on_file_event = on_file_event
        self._logger = logger or logging.getLogger(__name__)

        abs_path = os.path.abspath(path)
        self._watch_dir = os.path.realpath(os.path.dirname(abs_path))
        self._target = os.path.join(self._watch_dir, os.path.basename(abs_path))

        # 테스트용 호출 카운터 (for_test로 생성 시에만 설정)
        self.notify_counter: CallCounter | None = None

        self._events: "queue.Queue[Any]" = queue.Queue()
        self._handler = _EventForwarder(self._events, self._watch_dir)
        self._observer: BaseObserver | None = None
        self._watch: ObservedWatch | None = None
        self._thread: threading.Thread | None = None
        self._state_lock = threading.Lock()

    @classmethod
    def for_test(
        cls,
        path: str,
        on_file_event: OnFileEvent,
        logger: logging.Logger | None = None,
    ) -> "FileWatcher":
        """콜백 호출마다 notify_counter를 증가시키는 감시기 생성

        테스트는 sleep 대신 notify_counter.wait(n)으로 n번째 로드를 기다립니다.
        """
        counter = CallCounter()

        def wrapped(p: str) -> None:
            try:
                on_file_event(p)
            finally:
                counter.incr()

        watcher = cls(path, wrapped, logger=logger)
        watcher.notify_counter = counter
        return watcher

    @property
    def running(self) -> bool:
        """감시 루프 실행 여부"""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """파일 감시 시작

        감시 등록 후 백그라운드 루프를 시작하고 즉시 반환합니다.
        최초 콜백 호출은 루프에서 수행됩니다.

        Raises:
            PathNotFoundError: 감시 대상 파일이 없을 때
            WatchRegistrationError: OS 감시 등록 실패
            RuntimeError: 이미 실행 중일 때
        """
        with self._state_lock:
            if self._thread is not None:
                raise RuntimeError("FileWatcher가 이미 실행 중입니다")

            if not os.path.exists(self.path):
                raise PathNotFoundError("감시 대상 경로가 없습니다", path=self.path)

            self._events = queue.Queue()
            self._handler = _EventForwarder(self._events, self._watch_dir)

            observer = Observer()
            try:
                self._watch = observer.schedule(
                    self._handler, self._watch_dir, recursive=False
                )
                observer.start()
            except OSError as e:
                raise WatchRegistrationError(
                    "파일 감시 등록 실패", path=self.path
                ) from e

            self._observer = observer
            self._thread = threading.Thread(
                target=self._run,
                args=(self._events,),
                name=f"FileWatcher-{os.path.basename(self.path)}",
                daemon=True,
            )
            self._thread.start()

        self._logger.info(f"[FileWatcher] 파일 감시 시작: {self.path}")

    def stop(self) -> None:
        """파일 감시 중지

        감시 핸들을 닫은 뒤 루프 스레드가 종료될 때까지 대기합니다.
        시작하지 않은 감시기에서는 아무 동작도 하지 않습니다.
        진행 중인 콜백이 있으면 반환될 때까지 블로킹됩니다.
        """
        with self._state_lock:
            observer, self._observer = self._observer, None
            thread, self._thread = self._thread, None
            self._watch = None

        if observer is not None:
            observer.stop()
            observer.join()

        if thread is not None:
            self._events.put(_CLOSED)
            if thread is not threading.current_thread():
                thread.join()
            self._logger.info(f"[FileWatcher] 파일 감시 중지: {self.path}")

    def _run(self, events: "queue.Queue[Any]") -> None:
        """감시 루프 (백그라운드 스레드)"""
        # 이벤트가 한 번도 발생하지 않는 경우를 위해 최초 1회 강제 호출
        try:
            self._on_file_event(self.path)
        except Exception as e:
            self._logger.warning(
                f"[FileWatcher] 초기 콜백 실패 (fail open): {self.path} - {e}"
            )

        while True:
            item = events.get()
            if item is _CLOSED:
                return
            if isinstance(item, BaseException):
                self._logger.warning(f"[FileWatcher] 파일 감시 에러: {item}")
                continue
            self._handle_event(item)

    def _handle_event(self, event: WatchEvent) -> None:
        if event.path != self._target:
            return

        if event.op.invalidates_watch:
            # 기존 감시 핸들 무효화 → 재등록 후 콜백
            try:
                self._rewatch()
            except WatchRegistrationError as e:
                self._logger.warning(
                    f"[FileWatcher] 감시 재등록 실패: {self.path} - {e}"
                )
                return
            self._notify()
        elif event.op in (FileOp.CREATE, FileOp.WRITE):
            self._notify()
        else:
            self._logger.debug(
                f"[FileWatcher] 처리하지 않는 이벤트: {self.path}, op={event.op.value}"
            )

    def _rewatch(self) -> None:
        """감시 재등록

        Raises:
            WatchRegistrationError: 재등록 실패
        """
        with self._state_lock:
            observer = self._observer
            if observer is None:
                # stop() 진행 중
                return

            if self._watch is not None:
                try:
                    observer.unschedule(self._watch)
                except KeyError:
                    pass
                self._watch = None

            try:
                self._watch = observer.schedule(
                    self._handler, self._watch_dir, recursive=False
                )
            except OSError as e:
                raise WatchRegistrationError(
                    "파일 감시 재등록 실패", path=self.path
                ) from e

    def _notify(self) -> None:
        try:
            self._on_file_event(self.path)
        except Exception as e:
            self._logger.warning(f"[FileWatcher] 설정 파일 처리 실패: {self.path} - {e}")
