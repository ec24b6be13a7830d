"""
테스트 헬퍼

설정 파일을 원자적으로 기록합니다. 감시기가 쓰기 도중의 반쯤 쓰인 파일을 읽지 않도록
임시 파일에 쓴 뒤 rename으로 교체합니다.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

SCOPE = "test-scope"


def safe_write_file(path: str | Path, data: bytes | str) -> None:
    """임시 파일에 쓴 뒤 rename으로 교체"""
    path = Path(path)
    if isinstance(data, str):
        data = data.encode("utf-8")

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def config_records(values: dict[str, Any]) -> list[dict[str, Any]]:
    """{키: 값} → 설정 파일 레코드 목록"""
    return [{"key": key, "value": value} for key, value in values.items()]


def write_configs(path: str | Path, values: dict[str, Any]) -> None:
    """{키: 값}을 설정 파일 형식으로 기록"""
    safe_write_file(path, json.dumps(config_records(values)))
