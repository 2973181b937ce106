import logging
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from campaign_service.core.config import settings
from campaign_service.api.v1 import router as api_router
from campaign_service.core.db import init_db
from campaign_service.core.exceptions import register_exception_handlers
from campaign_service.core.logging import init_logging
from campaign_service.core.middleware import SecurityMiddleware
from campaign_service.core.security import GoogleIdentityVerifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_logging()
    init_db()

    # Process-wide clients, created once and handed to dependencies via app.state
    if settings.SECURITY_ENABLED and not settings.GOOGLE_CLIENT_ID:
        logger.warning("GOOGLE_CLIENT_ID is not set; identity tokens will be checked without an audience")
    app.state.identity_verifier = GoogleIdentityVerifier(settings.GOOGLE_CLIENT_ID or None)
    app.state.redis = None
    if settings.SEQUENCE_BACKEND == "redis":
        app.state.redis = redis.from_url(settings.REDIS_URL, decode_responses=True)

    yield

    if app.state.redis is not None:
        app.state.redis.close()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(SecurityMiddleware)
register_exception_handlers(app)


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "API is running...."


app.include_router(api_router, prefix=settings.API_V1_STR)
