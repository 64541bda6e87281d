"""구조화 로깅 설정 모듈 - structlog.

Structured logging configuration (structlog).
Every log entry carries the current request id when one is bound, and
sensitive keys (password, token, secret, authorization) are redacted
before rendering. JSON output by default; console output in development.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from gestor.config import settings

# 요청 ID 컨텍스트 변수 - Per-request correlation id
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie")


def get_request_id() -> str | None:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """요청 ID를 설정하거나 새로 생성합니다 (Set or generate the request id)."""
    rid = request_id or uuid.uuid4().hex
    request_id_var.set(rid)
    return rid


def _add_request_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    rid = get_request_id()
    if rid:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _redact(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """민감 필드 마스킹 - keeps the first/last 4 chars of long values."""
    for key in list(event_dict.keys()):
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            value = event_dict[key]
            if isinstance(value, str) and len(value) > 12:
                event_dict[key] = f"{value[:4]}***{value[-4:]}"
            else:
                event_dict[key] = "***"
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True, development_mode: bool = False) -> None:
    """structlog 프로세서 체인 구성.

    Configure the structlog processor chain.

    Args:
        log_level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR)
        json_output: True이면 JSON 출력 (Render JSON lines)
        development_mode: True이면 콘솔 출력 (Human-readable console output)
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_request_id,
        _redact,
        structlog.processors.StackInfoRenderer(),
    ]

    if development_mode or not json_output:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=False)]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(
    log_level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON,
    development_mode=settings.is_development,
)


def get_logger(name: str) -> Any:
    """이름이 지정된 로거 반환 (Return a named structlog logger)."""
    return structlog.get_logger(name)
