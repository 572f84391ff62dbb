# wecargo/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi import FastAPI, Request
from sqlalchemy.exc import SQLAlchemyError

from wecargo.core.config import get_settings
from wecargo.core.errors import AppError, PersistenceError
from wecargo.database import Database

# Routers
from wecargo.routers.admin import router as admin_router
from wecargo.routers.customers import router as customers_router
from wecargo.routers.deliveries import router as deliveries_router
from wecargo.routers.deliveries import employee_router as employee_deliveries_router
from wecargo.routers.employees import admin_router as admin_employees_router
from wecargo.routers.employees import router as employees_router
from wecargo.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


def _error_response(kind: str, detail, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"kind": kind, "detail": detail}),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc.kind, exc.detail, exc.status_code, exc.headers)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _error_response(
        "validation",
        exc.errors(),
        422,
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    error = PersistenceError("Database error")
    return _error_response(error.kind, error.detail, error.status_code)


def create_app(database: Database | None = None) -> FastAPI:
    """
    Build the API.

    `database` is injected by tests; otherwise one is built from settings.
    """
    db = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Verify DB connectivity and create tables.

        Shutdown:
          - Dispose of the engine's connection pool.
        """
        logger.info("Startup: connecting to %s", db.engine.url.render_as_string(hide_password=True))
        try:
            db.create_all()
            logger.info("Startup: DB connection OK, tables verified.")
        except SQLAlchemyError as e:
            logger.error("Startup: DB connection FAILED: %s", e)
            raise
        yield
        db.dispose()
        logger.info("Shutdown: DB engine disposed.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)

    # Versioned API prefix, e.g. /api/v1
    for router in (
        orders_router,
        deliveries_router,
        employee_deliveries_router,
        customers_router,
        employees_router,
        admin_employees_router,
        admin_router,
    ):
        app.include_router(router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "wecargo-backend"}

    return app


app = create_app()
