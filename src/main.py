import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from src.config.database import dispose_engine, init_db
from src.config.logging import setup_logging
from src.config.settings import settings
from src.invitations.routers import router as invitations_router
from src.routers.healthz.router import router as healthz_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await init_db()
    logger.info(f"Invitations API starting ({settings.ENVIRONMENT})")
    yield
    await dispose_engine()


def init_sentry() -> None:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            # Rejections (closed, already responded) are 4xx and not reported
            FastApiIntegration(
                transaction_style="endpoint", failed_request_status_codes={*range(500, 600)}
            ),
        ],
        send_default_pii=False,
    )


if settings.SENTRY_DSN:
    init_sentry()

app = FastAPI(
    title="Invitations API",
    description="Casual invitations: answer YES, NO or MAYBE before the deadline",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(invitations_router, tags=["Invitations"])


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the Invitations API"}
