"""
로깅 설정
JSON 포맷 콘솔 + 일 단위 로테이션 파일 핸들러, 요청 로깅 미들웨어
"""
import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from fastapi import HTTPException, Request
import config
from server.auth import decode_token

# 요청 단위 상관관계 ID / 사용자 ID
correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)
user_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("user_id", default=None)

# 레코드 extra로 전달되면 JSON에 포함할 필드
EXTRA_FIELDS = (
    "path", "method", "status_code", "latency_ms", "client_host",
    "store", "document", "operation", "file", "error",
)


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get()
        record.user_id = user_id_ctx.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None),
            "user_id": getattr(record, "user_id", None),
        }
        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                payload[key] = val
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _make_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(ContextFilter())
    return handler


def init_logging(log_dir: Path | None = None):
    """루트 로거 초기화 (reload 시 중복 핸들러 제거)"""
    log_dir = Path(log_dir or config.LOG_DIR)
    level = getattr(logging, config.LOG_LEVEL, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(_make_handler(logging.StreamHandler(), level))

    log_dir.mkdir(parents=True, exist_ok=True)
    root.addHandler(_make_handler(
        TimedRotatingFileHandler(log_dir / "app.log", when="midnight", backupCount=7, utc=True),
        level,
    ))

    logging.getLogger(__name__).info("Logging initialized")


def _request_user_id(request: Request) -> str | None:
    """Authorization 헤더의 JWT에서 사용자 ID 추출 (검증 실패 시 None)"""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        return decode_token(token).get("sub")
    except HTTPException:
        return None


def install_request_logging(app):
    """요청 로깅 미들웨어 등록"""
    logger = logging.getLogger("request")

    @app.middleware("http")
    async def _log_middleware(request: Request, call_next):
        corr = request.headers.get("X-Request-ID") or os.urandom(8).hex()
        correlation_id_ctx.set(corr)
        # 스레드풀 의존성에서 set한 값은 요청 컨텍스트로 전파되지 않음
        user_id = _request_user_id(request)
        user_id_ctx.set(user_id)

        start = datetime.now(timezone.utc)
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "request_failed",
                exc_info=True,
                extra={"path": request.url.path, "method": request.method, "status_code": 500},
            )
            raise
        finally:
            latency_ms = int((datetime.now(timezone.utc) - start).total_seconds() * 1000)

        logger.info(
            "request_completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "latency_ms": latency_ms,
                "client_host": request.client.host if request.client else None,
                "user_id": user_id,
            },
        )
        response.headers["X-Request-ID"] = corr
        return response
