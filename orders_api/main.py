import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orders_api.core.config import CORS_ORIGINS, DATABASE_URL, SEED_DATABASE
from orders_api.core.database import Base, SessionLocal, engine
from orders_api.core.exception_handlers import register_exception_handlers
from orders_api.core.logging_setup import configure_logging
from orders_api.core.startup_checks import (
    apply_migrations,
    ensure_migrations_applied,
    validate_runtime_environment,
)
from orders_api.middleware.observability import ObservabilityMiddleware
import orders_api.models  # registers every table before create_all
from orders_api.routers.auth import router as auth_router
from orders_api.routers.customers import router as customers_router
from orders_api.routers.internal_metrics import router as internal_metrics_router
from orders_api.routers.orders import router as orders_router
from orders_api.routers.products import router as products_router
from orders_api.services.seed import seed_database

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="OrdersMini API",
    description="Customers, products and orders with soft delete and price snapshots.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

register_exception_handlers(app)


def _seed_if_enabled() -> None:
    if not SEED_DATABASE:
        logger.info("%s seeding disabled", STARTUP_PREFIX)
        return

    db = SessionLocal()
    try:
        seed_database(db)
    finally:
        db.close()


def _startup_tasks() -> None:
    try:
        validate_runtime_environment()
        apply_migrations(alembic_config_path=ALEMBIC_CONFIG_PATH)
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        _seed_if_enabled()
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
