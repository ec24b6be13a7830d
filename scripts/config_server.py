#!/usr/bin/env python
"""
설정 조회 샘플 서버 실행 스크립트

사용법:
    # 개발 모드 (핫 리로드)
    python scripts/config_server.py --env dev --reload

    # 감시 디렉토리/스코프 지정
    python scripts/config_server.py --config-dir ./configs --scope configsample

    # 커스텀 포트
    python scripts/config_server.py --port 8080
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def setup_logging(level: str = "INFO") -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_env_file(env: str) -> None:
    """환경별 .env 파일 로드"""
    env_files = [
        PROJECT_ROOT / f".env.{env}",
        PROJECT_ROOT / ".env.local",
        PROJECT_ROOT / ".env",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file)
            print(f"[Config] 환경 파일 로드: {env_file}")
            break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="configmanager 설정 조회 샘플 서버",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
    # 개발 모드
    python scripts/config_server.py --env dev --reload

    # 감시 대상 지정
    python scripts/config_server.py --config-dir /etc/configs --scope configsample
        """,
    )

    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="실행 환경 (기본: dev)",
    )

    # 서버 설정
    parser.add_argument(
        "--host",
        default=None,
        help="바인딩 호스트 (기본: 환경변수 API_HOST 또는 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="바인딩 포트 (기본: 환경변수 API_PORT 또는 8000)",
    )

    # 감시 대상
    parser.add_argument(
        "--config-dir",
        default=None,
        help="설정 루트 디렉토리 (기본: 환경변수 CONFIG_DIR 또는 /etc/configs)",
    )
    parser.add_argument(
        "--scope",
        default=None,
        help="설정 스코프 (기본: 환경변수 CONFIG_SCOPE 또는 configsample)",
    )

    # 개발 옵션
    parser.add_argument(
        "--reload",
        action="store_true",
        help="코드 변경 시 자동 리로드 (개발 모드용)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="로그 레벨",
    )
    return parser


def main() -> None:
    """메인 함수"""
    args = build_parser().parse_args()

    os.environ["ENV"] = args.env
    load_env_file(args.env)

    log_level = args.log_level or os.getenv(
        "LOG_LEVEL", "DEBUG" if args.env == "dev" else "INFO"
    )
    setup_logging(log_level)

    # 명령행 인자가 환경변수보다 우선 (ServerSettings.from_env에서 읽음)
    if args.host:
        os.environ["API_HOST"] = args.host
    if args.port:
        os.environ["API_PORT"] = str(args.port)
    if args.config_dir:
        os.environ["CONFIG_DIR"] = args.config_dir
    if args.scope:
        os.environ["CONFIG_SCOPE"] = args.scope
    os.environ["LOG_LEVEL"] = log_level

    from configserver.settings import ConfigurationError, ServerSettings

    settings = ServerSettings.from_env()
    try:
        settings.validate(strict=True)
    except ConfigurationError as e:
        print(f"[Error] {e}")
        sys.exit(1)

    print(f"""
[Server] 설정 조회 샘플 서버
  환경: {settings.env}
  주소: {settings.api_host}:{settings.api_port}
  감시: {settings.config_dir}/{settings.config_scope}/configs.json
  리로드: {'ON' if args.reload else 'OFF'}
    """)

    uvicorn_config = {
        "app": "configserver.server:app",
        "host": settings.api_host,
        "port": settings.api_port,
        "log_level": log_level.lower(),
        "reload": args.reload,
    }
    if args.reload:
        uvicorn_config["reload_dirs"] = [
            str(PROJECT_ROOT / "configmanager"),
            str(PROJECT_ROOT / "configserver"),
        ]

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        print("\n[Server] 서버 종료")


if __name__ == "__main__":
    main()
