"""
FastAPI 앱 정의 및 라우터 통합

설정 조회 샘플 서버의 메인 모듈입니다.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from configmanager import ConfigManagerError, new_client, new_null_client

from .dependencies import get_config_client, get_settings, set_config_client
from .routes import config_router, debug_router, health_router
from .routes.health import API_VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """앱 라이프사이클 관리

    시작 시:
        - 설정 파일 감시 시작 (첫 로드까지 워커 스레드에서 대기)
        - 실패하면 Null 클라이언트로 대체

    종료 시:
        - 감시 중지
    """
    settings = get_settings()
    settings.validate(strict=False)

    try:
        client = await asyncio.to_thread(
            new_client,
            settings.config_dir,
            settings.config_scope,
            load_timeout=settings.load_timeout,
        )
        logger.info(
            f"[Server] 설정 클라이언트 초기화 완료: "
            f"{settings.config_dir}/{settings.config_scope}"
        )
    except ConfigManagerError as e:
        logger.warning(f"[Server] 설정 클라이언트 초기화 실패, 기본값으로 동작: {e}")
        client = new_null_client()
    set_config_client(client)

    yield

    get_config_client().close()
    set_config_client(None)
    logger.info("[Server] 서버 종료")


def create_app(
    title: str = "Config Sample API",
    version: str = API_VERSION,
    debug: bool = False,
) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        title: API 제목
        version: API 버전
        debug: 디버그 모드

    Returns:
        FastAPI 앱 인스턴스
    """
    settings = get_settings()

    app = FastAPI(
        title=title,
        version=version,
        description="""
# Config Sample API

디스크의 JSON 설정 파일을 감시하며 현재 값을 조회합니다.

## 주요 기능

- **설정 값 조회**: GET /config?key=...
- **화이트리스트 확인**: GET /whitelist?key=...&project_id=...
- **기능 플래그 평가**: GET /feature?key=...
- **디버그 변수**: GET /debug/vars
        """,
        debug=debug or settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 라우터 등록
    app.include_router(health_router)  # /health
    app.include_router(config_router)  # /config, /whitelist, /feature
    app.include_router(debug_router)  # /debug/vars

    # 글로벌 예외 핸들러
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """글로벌 예외 핸들러"""
        logger.exception(f"[Server] 처리되지 않은 예외: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "Internal server error",
                "details": str(exc) if settings.debug else None,
            },
        )

    return app


# 기본 앱 인스턴스
app = create_app()
