"""
설정 조회 API 엔드포인트 테스트

/config, /whitelist, /feature, /health, /debug/vars 통합 테스트입니다.
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from configmanager import (
    Config,
    ConfigClient,
    DummyStateManager,
    TestClient,
    debugvars,
)
from configserver.dependencies import (
    get_config_client,
    set_config_client,
    set_settings,
)
from configserver.server import create_app, lifespan
from configserver.settings import ServerSettings
from tests.helpers import SCOPE, write_configs


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def settings(tmp_path: Path):
    """테스트용 서버 설정"""
    s = ServerSettings(env="dev", config_dir=str(tmp_path), config_scope=SCOPE)
    set_settings(s)
    yield s
    set_settings(None)


@pytest.fixture
def test_client() -> TestClient:
    """값이 주입된 설정 클라이언트"""
    return (
        TestClient()
        .set_int64("batch_size", 100)
        .set_string("name", "sample")
        .set_projects_whitelist("projects", 1, 42)
        .set_raw("broken", b"{oops")
    )


@pytest.fixture
async def app_client(settings, test_client):
    """테스트용 FastAPI 앱 클라이언트"""
    set_config_client(test_client)

    app = create_app(debug=True)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    set_config_client(None)


class TestConfigEndpoint:
    """GET /config 테스트"""

    async def test_get_config(self, app_client):
        """값과 원본 JSON 반환"""
        response = await app_client.get("/config", params={"key": "batch_size"})

        assert response.status_code == 200
        assert response.json() == {"key": "batch_size", "value": 100, "raw": "100"}

    async def test_get_string_config(self, app_client):
        """문자열 값"""
        response = await app_client.get("/config", params={"key": "name"})

        assert response.status_code == 200
        data = response.json()
        assert data["value"] == "sample"
        assert data["raw"] == '"sample"'

    async def test_config_not_found(self, app_client):
        """키 없음 → 404 CONFIG_NOT_FOUND"""
        response = await app_client.get("/config", params={"key": "missing"})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "CONFIG_NOT_FOUND"

    async def test_invalid_raw(self, app_client):
        """해석 불가 원본 → 422 CONFIG_INVALID"""
        response = await app_client.get("/config", params={"key": "broken"})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "CONFIG_INVALID"

    async def test_key_required(self, app_client):
        """key 파라미터 필수"""
        response = await app_client.get("/config")

        assert response.status_code == 422


class TestWhitelistEndpoint:
    """GET /whitelist 테스트"""

    async def test_whitelisted(self, app_client):
        """포함된 프로젝트"""
        response = await app_client.get(
            "/whitelist", params={"key": "projects", "project_id": 42}
        )

        assert response.status_code == 200
        assert response.json() == {
            "key": "projects",
            "project_id": 42,
            "whitelisted": True,
        }

    async def test_not_whitelisted(self, app_client):
        """포함되지 않은 프로젝트"""
        response = await app_client.get(
            "/whitelist", params={"key": "projects", "project_id": 7}
        )

        assert response.json()["whitelisted"] is False

    async def test_missing_key(self, app_client):
        """키 없음 → false"""
        response = await app_client.get(
            "/whitelist", params={"key": "missing", "project_id": 1}
        )

        assert response.status_code == 200
        assert response.json()["whitelisted"] is False

    async def test_invalid_project_id(self, app_client):
        """정수가 아닌 project_id → 422"""
        response = await app_client.get(
            "/whitelist", params={"key": "projects", "project_id": "abc"}
        )

        assert response.status_code == 422


class TestFeatureEndpoint:
    """GET /feature 테스트"""

    async def test_feature_probability(self, settings):
        """고정 난수로 확률 평가"""
        sm = DummyStateManager()
        client = ConfigClient(sm, rng=FixedRandom(0.8))
        set_config_client(client)
        sm.set_config(Config.from_value("on", 0.9)).set_config(
            Config.from_value("off", 0.1)
        )
        app = create_app(debug=True)

        try:
            async with AsyncClient(
                transport=ASGITransport(app=app), base_url="http://test"
            ) as http:
                on = await http.get("/feature", params={"key": "on"})
                off = await http.get("/feature", params={"key": "off"})
        finally:
            set_config_client(None)

        assert on.json() == {"key": "on", "enabled": True}
        assert off.json() == {"key": "off", "enabled": False}

    async def test_feature_default(self, app_client):
        """키 없음 → enabled_by_default"""
        enabled = await app_client.get(
            "/feature", params={"key": "missing", "enabled_by_default": "true"}
        )
        disabled = await app_client.get("/feature", params={"key": "missing"})

        assert enabled.json()["enabled"] is True
        assert disabled.json()["enabled"] is False


class TestHealthEndpoints:
    """헬스체크 테스트"""

    async def test_health(self, app_client):
        """서버 상태와 스코프"""
        response = await app_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["scope"] == SCOPE
        assert data["config"] == "live"
        assert data["uptime_seconds"] >= 0

    async def test_liveness(self, app_client):
        """liveness"""
        response = await app_client.get("/health/live")

        assert response.json() == {"status": "ok"}

    async def test_readiness(self, app_client):
        """클라이언트 주입 시 ready"""
        response = await app_client.get("/health/ready")

        assert response.json() == {"status": "ready"}

    async def test_not_ready_without_client(self, app_client):
        """클라이언트 없으면 not_ready"""
        set_config_client(None)

        response = await app_client.get("/health/ready")
        health = await app_client.get("/health")

        assert response.json()["status"] == "not_ready"
        assert health.json()["config"] == "null"


class TestDebugVarsEndpoint:
    """GET /debug/vars 테스트"""

    async def test_debug_vars(self, app_client):
        """공개된 디버그 변수 반환"""
        debugvars.publish("configmanager.sample").replace({"foo": '"bar"'})

        response = await app_client.get("/debug/vars")

        assert response.status_code == 200
        assert response.json() == {"configmanager.sample": {"foo": '"bar"'}}


class TestLifespan:
    """앱 라이프사이클 테스트"""

    async def test_builds_file_client(self, settings, tmp_path: Path):
        """설정 파일이 있으면 파일 감시 클라이언트"""
        (tmp_path / SCOPE).mkdir()
        write_configs(tmp_path / SCOPE / "configs.json", {"foo": 1})
        app = create_app()

        async with lifespan(app):
            client = get_config_client()
            assert client.get_int64("foo", 0) == 1
            assert client.state_manager.watcher.running

        assert client.state_manager.watcher is None

    async def test_falls_back_to_null_client(self, settings, caplog):
        """설정 파일이 없으면 Null 클라이언트로 대체"""
        app = create_app()

        async with lifespan(app):
            client = get_config_client()
            assert client.get_int64("foo", 7) == 7

        assert any("초기화 실패" in r.getMessage() for r in caplog.records)
