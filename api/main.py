import time
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from api.v1.router import api_router
from core.exceptions import setup_exception_handlers
from utils.logging import get_logger, setup_logging
from prometheus_fastapi_instrumentator import Instrumentator

setup_logging()
logger = get_logger(__name__)
settings = get_settings()


async def _init_db() -> None:
    """Initialize database connections."""
    logger.info("Initializing database connections...")
    from config.database import init_db

    await init_db()


async def _seed_admin() -> None:
    """Create the first admin account when ADMIN_* settings are present."""
    from config.database import get_db_context
    from services.bootstrap.seed_admin import seed_initial_admin

    async with get_db_context() as session:
        await seed_initial_admin(session)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager with minimal, robust initialization."""
    logger.info("Starting Landing CRM API...")

    try:
        await _init_db()
        logger.info("Database initialized")

        await _seed_admin()
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        raise

    yield

    logger.info("Shutting down Landing CRM API...")

    try:
        from config.database import close_db

        await close_db()

        logger.info("Application shutdown complete")

    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Staff authentication, password recovery and user management for the landing CRM",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

setup_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics
Instrumentator().instrument(app).expose(app, include_in_schema=False, endpoint="/metrics")

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with performance tracking"""
    start_time = time.time()
    logger.info(f"{request.method} {request.url.path} - Started")

    response = await call_next(request)

    process_time = time.time() - start_time
    status_label = "Success" if response.status_code < 400 else "Failed"
    extra = {"path": request.url.path, "status_code": response.status_code}
    # set by the auth dependency on authenticated routes
    user = getattr(request.state, "user", None)
    if user:
        extra["user_id"] = user.get("id")
    logger.info(
        f"{status_label} {request.method} {request.url.path} - "
        f"Status: {response.status_code} - Time: {process_time:.4f}s",
        extra=extra,
    )

    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-System-Version"] = settings.APP_VERSION

    return response

# Routers
app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT or 8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True,
    )
