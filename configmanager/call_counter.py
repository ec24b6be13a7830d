"""
호출 카운터

한 스레드가 호출마다 카운터를 증가시키고, 다른 스레드는 카운터가
기대값에 도달할 때까지 블로킹할 수 있게 합니다. 테스트에서 sleep 대신
백그라운드 작업 완료를 결정적으로 기다리는 용도입니다.
"""

import threading


class CallCounter:
    """조건 변수 기반 호출 카운터 (스레드 안전)"""

    def __init__(self):
        self._cond = threading.Condition()
        self._count = 0

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def incr(self) -> None:
        """카운터 증가 및 대기자 깨우기"""
        with self._cond:
            self._count += 1
            self._cond.notify_all()

    def wait(self, expected: int, timeout: float | None = None) -> bool:
        """카운터가 expected 이상이 될 때까지 대기

        Args:
            expected: 기대 호출 횟수
            timeout: 최대 대기 시간 (초), None이면 무한 대기

        Returns:
            bool: 기대값 도달 여부 (timeout 만료 시 False)
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count >= expected, timeout)
