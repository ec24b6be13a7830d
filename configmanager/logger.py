"""
로거 헬퍼

모든 컴포넌트는 생성 시 logging.Logger를 주입받습니다.
주입하지 않으면 모듈 로거를 사용하고, 로그를 남기지 않을 때는 null_logger()를 사용합니다.
"""

import logging

ROOT_LOGGER_NAME = "configmanager"


class NullLogger(logging.Logger):
    """모든 레코드를 버리는 로거

    getChild()도 자기 자신을 반환하므로 호출 지점별 스코프에서도 조용합니다.
    """

    def __init__(self, name: str = "configmanager.null"):
        super().__init__(name, level=logging.CRITICAL + 1)
        self.propagate = False
        self.disabled = True
        self.addHandler(logging.NullHandler())

    def getChild(self, suffix: str) -> "NullLogger":
        return self


_null_logger = NullLogger()


def null_logger() -> NullLogger:
    """공용 NullLogger 인스턴스"""
    return _null_logger


def get_logger(name: str | None = None) -> logging.Logger:
    """configmanager 하위 로거 조회

    Args:
        name: 하위 이름 (예: "state_manager"), None이면 루트 로거

    Returns:
        logging.Logger
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
