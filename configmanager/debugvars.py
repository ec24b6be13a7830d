"""
디버그 변수 레지스트리

프로세스 전역에서 이름별 키/값 맵을 공개합니다 (Go expvar와 유사).
StateManager는 로드할 때마다 `configmanager.<scope>` 맵에 키별 원본 값을 기록하고,
샘플 서버의 /debug/vars 엔드포인트가 이를 노출합니다.
"""

import threading
from typing import Any

_registry: dict[str, "DebugVarMap"] = {}
_registry_lock = threading.Lock()


class DebugVarMap:
    """스레드 안전한 문자열 키 맵"""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def replace(self, values: dict[str, Any]) -> None:
        """전체 내용 교체 (삭제된 키 제거)"""
        with self._lock:
            self._values = dict(values)

    def items(self) -> dict[str, Any]:
        """현재 내용의 복사본"""
        with self._lock:
            return dict(self._values)


def publish(name: str) -> DebugVarMap:
    """이름으로 맵 조회, 없으면 생성"""
    with _registry_lock:
        var_map = _registry.get(name)
        if var_map is None:
            var_map = DebugVarMap(name)
            _registry[name] = var_map
        return var_map


def get(name: str) -> DebugVarMap | None:
    with _registry_lock:
        return _registry.get(name)


def all_vars() -> dict[str, dict[str, Any]]:
    """전체 레지스트리 내보내기"""
    with _registry_lock:
        maps = list(_registry.values())
    return {var_map.name: var_map.items() for var_map in maps}


def clear() -> None:
    """레지스트리 초기화 (테스트용)"""
    with _registry_lock:
        _registry.clear()
