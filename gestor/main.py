"""FastAPI 애플리케이션 엔트리포인트 - 미들웨어 및 라우터 등록.

FastAPI application entry point - Middleware, exception handlers, and
router registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gestor import __version__
from gestor.api import api_router
from gestor.config import settings
from gestor.database import engine
from gestor.logger import get_logger
from gestor.middleware.axiom_logging import AxiomLoggingMiddleware
from gestor.middleware.rate_limit import RateLimitMiddleware
from gestor.middleware.request_id import RequestIdMiddleware
from gestor.utils.error_handlers import register_exception_handlers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("server_started", environment=settings.ENVIRONMENT, api_prefix=settings.API_PREFIX)
    yield
    # 커넥션 풀 정리 - Release pooled connections on shutdown
    await engine.dispose()
    logger.info("server_stopped")


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)

# 미들웨어 - 나중에 등록한 것이 바깥쪽에서 실행됨
# (Middleware added last runs outermost: CORS → request id → audit log → rate limit)
app.add_middleware(RateLimitMiddleware, limit=settings.RATE_LIMIT_PER_MINUTE, window_seconds=60)
app.add_middleware(AxiomLoggingMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.API_PREFIX)
