import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime

import httpx
import sentry_sdk
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.middleware import RequestLoggingMiddleware
from api.requests.api_render_slide import router as render_slide_router
from config.logging_config import apply_logging_config
from config.render_config import get_render_config

load_dotenv(override=True)

logging_config = apply_logging_config()
logger = logging.getLogger(__name__)


def init_sentry():
    """Enable Sentry error reporting when SENTRY_DSN is configured"""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_logging = LoggingIntegration(
        level=logging.INFO,        # Capture info and above as breadcrumbs
        event_level=logging.ERROR  # Send errors as events
    )
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(transaction_style='endpoint'),
            sentry_logging,
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        environment=os.getenv("ENV", "development"),
        send_default_pii=False,
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_render_config()
    app.state.http_client = httpx.AsyncClient(follow_redirects=True, timeout=config.asset_fetch_timeout)
    logger.info(f"Render service ready (fonts: {config.fonts_dir})")
    try:
        yield
    finally:
        await app.state.http_client.aclose()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"success": False, "error": "Method not allowed"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))


def create_app() -> FastAPI:
    config = get_render_config()
    init_sentry()

    app = FastAPI(title="Carousel Slide Renderer", lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware, log_requests=logging_config.get("log_requests", True))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(render_slide_router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    return app


app = create_app()


if __name__ == "__main__":
    config = get_render_config()
    logger.info(f"Starting Carousel Slide Renderer on http://{config.host}:{config.port}")
    uvicorn.run("api.server:app", host=config.host, port=config.port, workers=1)
