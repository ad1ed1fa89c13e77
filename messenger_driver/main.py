"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from messenger_driver.api import health, webhook
from messenger_driver.config import get_settings
from messenger_driver.logging_config import setup_logfire
from messenger_driver.middleware.correlation_id import CorrelationIDMiddleware
from messenger_driver.services.conversation import NullConversationHandler

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    # Host applications install their handler before startup
    if getattr(app.state, "conversation_handler", None) is None:
        app.state.conversation_handler = NullConversationHandler()

    config = settings.facebook_config()
    logfire.info(
        "Application startup complete",
        environment=settings.env,
        graph_api_url=settings.facebook_graph_api_url,
        signature_verification=bool(config.app_secret),
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Facebook Messenger Driver",
    description="Webhook adapter between Facebook Messenger and a chat-bot engine",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Facebook Messenger Driver API",
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "messenger_driver.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV") == "local",
    )
