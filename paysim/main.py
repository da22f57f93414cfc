from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware

from paysim.core.config import settings, app_logger
from paysim.core.exceptions.handlers import (
    card_exception_handler,
    exception_schema,
    general_exception_handler,
    not_found_exception_handler,
    stripe_error_exception_handler,
)
from paysim.core.exceptions.types import (
    AppException,
    CardException,
    NotFoundException,
    StripeErrorException,
)
from paysim.core.routers import api_routers
from paysim.core.simulator import Simulator

API_PREFIX = "/v1"
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("Starting application...")
    simulator: Simulator = app.state.simulator

    # Start the delayed task scheduler (only if enabled)
    if settings.ENABLE_SCHEDULER:
        app_logger.info("Starting scheduler...")
        simulator.start()
        app_logger.info("Scheduler started successfully.")
    else:
        app_logger.info("Scheduler disabled via ENABLE_SCHEDULER setting.")

    # Yield control back to the application
    yield

    # Cleanup on shutdown
    app_logger.info("Shutting down application...")
    await simulator.aclose()
    app_logger.info("Application shut down successfully.")


def create_app(simulator: Simulator | None = None) -> FastAPI:
    """
    Build the simulator application.

    Args:
        simulator: The simulated backend to serve. Tests pass one wired to a
            ``ManualTaskScheduler`` and a mock HTTP transport; by default a
            fresh ``Simulator`` on the APScheduler scheduler is used.

    Returns:
        FastAPI: The configured application.
    """
    app = FastAPI(
        lifespan=lifespan,
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        debug=settings.DEBUG,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        responses=exception_schema,
    )
    app.state.simulator = simulator or Simulator()

    # Register exception handlers (order matters - more specific first)
    app.add_exception_handler(CardException, card_exception_handler)
    app.add_exception_handler(NotFoundException, not_found_exception_handler)
    app.add_exception_handler(StripeErrorException, stripe_error_exception_handler)
    # Generic fallback
    app.add_exception_handler(AppException, general_exception_handler)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    for router, tag in api_routers:
        app.include_router(router, prefix=API_PREFIX, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root(request: Request):
        base_url = str(request.base_url).rstrip("/")
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "api_base": f"{base_url}{API_PREFIX}",
            "documentations": {
                "swagger": f"{base_url}/docs",
                "redoc": f"{base_url}/redoc",
            },
            "version": settings.APP_VERSION,
            "api_version": settings.API_VERSION,
        }

    @app.head("/health", include_in_schema=False)
    @app.get("/health")
    async def health_check():
        """Health check endpoint to verify if the simulator is running."""
        return {
            "status": "ok",
            "message": f"{settings.APP_NAME} is running.",
        }

    # Must stay last: anything the routers above did not match
    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def unmatched_path(path: str):
        raise NotFoundException(f"No matching path: /{path}")

    return app


app = create_app()
