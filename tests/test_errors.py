"""
에러 분류 시스템 테스트

에러 종류 판별 및 키 부재의 정상 흐름 처리 테스트.
"""

import pytest

from configmanager import (
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


class TestErrorKinds:
    """에러 클래스별 종류 테스트"""

    @pytest.mark.parametrize(
        "error_class, kind",
        [
            (PathNotFoundError, ErrorKind.PATH_NOT_FOUND),
            (WatchRegistrationError, ErrorKind.WATCH_REGISTRATION),
            (ReadError, ErrorKind.READ),
            (ParseError, ErrorKind.PARSE),
            (UnmarshalMismatchError, ErrorKind.UNMARSHAL_MISMATCH),
            (LoadTimeoutError, ErrorKind.LOAD_TIMEOUT),
        ],
    )
    def test_kind(self, error_class, kind):
        """클래스별 고정 종류"""
        error = error_class("failed", path="/tmp/x")

        assert error.kind == kind
        assert error.details == {"path": "/tmp/x"}

    def test_base_error_kind_override(self):
        """기본 에러는 생성 시 종류 지정 가능"""
        error = ConfigManagerError("failed", kind=ErrorKind.READ)

        assert error.kind == ErrorKind.READ
        assert ConfigManagerError("failed").kind == ErrorKind.UNKNOWN

    def test_str_with_details(self):
        """상세 정보는 메시지 뒤에 표시"""
        error = ParseError("설정 JSON 파싱 실패", path="/etc/configs.json")

        assert str(error) == "설정 JSON 파싱 실패 (path=/etc/configs.json)"

    def test_annotate_returns_self(self):
        """annotate는 상세 정보를 추가하고 자기 자신 반환"""
        error = PathNotFoundError("missing", path="/a")

        assert error.annotate(scope="sample") is error
        assert error.details == {"path": "/a", "scope": "sample"}


class TestKeyNotFoundError:
    """키 부재 에러 테스트"""

    def test_is_key_error(self):
        """KeyError로도 잡을 수 있음"""
        with pytest.raises(KeyError):
            raise KeyNotFoundError("foo")

    def test_key_attribute(self):
        """키 정보 보존"""
        error = KeyNotFoundError("foo")

        assert error.key == "foo"
        assert error.kind == ErrorKind.NOT_FOUND
        assert str(error) == "Config not found (key=foo)"

    def test_unmarshal_mismatch_is_value_error(self):
        """UnmarshalMismatchError는 ValueError 하위 타입"""
        assert issubclass(UnmarshalMismatchError, ValueError)


class TestErrorClassifier:
    """에러 분류기 테스트"""

    def test_classify_direct(self):
        """ConfigManagerError는 자신의 종류"""
        assert ErrorClassifier.classify(ReadError("x")) == ErrorKind.READ

    def test_classify_unknown(self):
        """일반 예외는 UNKNOWN"""
        assert ErrorClassifier.classify(ValueError("x")) == ErrorKind.UNKNOWN

    def test_classify_follows_cause(self):
        """cause 체인의 ConfigManagerError 종류 사용"""
        try:
            try:
                raise ParseError("bad json")
            except ParseError as e:
                raise RuntimeError("wrapped") from e
        except RuntimeError as wrapped:
            assert ErrorClassifier.classify(wrapped) == ErrorKind.PARSE

    def test_is_expected_only_not_found(self):
        """키 부재만 예상된 에러"""
        assert ErrorClassifier.is_expected(KeyNotFoundError("foo"))
        assert not ErrorClassifier.is_expected(UnmarshalMismatchError("x"))
        assert not ErrorClassifier.is_expected(ReadError("x"))
        assert not ErrorClassifier.is_expected(ValueError("x"))

    def test_format_message(self):
        """종류 라벨 포함 메시지"""
        message = ErrorClassifier.format_message(ReadError("읽기 실패"))

        assert message == "[read_error] ReadError: 읽기 실패"

    def test_format_message_with_traceback(self):
        """스택 트레이스 포함"""
        try:
            raise ParseError("bad json")
        except ParseError as e:
            message = ErrorClassifier.format_message(e, include_traceback=True)

        assert message.startswith("[parse_error] ParseError: bad json")
        assert "상세 정보:" in message
        assert "Traceback" in message
