# assetdex/main.py
from contextlib import asynccontextmanager
import asyncio
import importlib
import json
from time import perf_counter
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy import text

from assetdex.core.config import get_env_load_state, load_environment, settings
from assetdex.core.middleware import LoggingMiddleware

APP_VERSION = "1.0.0"


class PrettyJSONResponse(JSONResponse):
    """JSONResponse that pretty-prints JSON with indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=2,
            separators=(",", ": "),
        ).encode("utf-8")


load_environment()  # load .env.<APP_ENV> before settings are first read

ROUTER_MODULES = (
    "assetdex.dcim.routers.rack_router",
    "assetdex.dcim.routers.server_router",
)


def _import_router(module_path: str):
    """
    Import a router module and return its `router` attribute.
    Kept sync so it can be executed inside a thread without touching the loop.
    """
    module = importlib.import_module(module_path)
    router = getattr(module, "router", None)
    if router is None:
        raise AttributeError(f"Module {module_path} does not expose a FastAPI router named 'router'")
    return router


def _load_router_with_profile(module_path: str):
    start = perf_counter()
    router = _import_router(module_path)
    return module_path, router, (perf_counter() - start) * 1000


async def _load_routers(app: FastAPI, module_paths, app_logger):
    """Load routers concurrently while still logging individual durations."""
    results = await asyncio.gather(
        *(asyncio.to_thread(_load_router_with_profile, module_path) for module_path in module_paths),
        return_exceptions=True,
    )

    for result in results:
        if isinstance(result, Exception):
            raise result

        module_path, router, load_ms = result
        app.include_router(router)
        app_logger.debug(
            "Router loaded",
            extra={"router_module": module_path, "load_ms": round(load_ms, 2)},
        )


def _ping_database() -> None:
    from assetdex.db.session import get_engine

    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))


async def _prewarm_database(app_logger):
    """Ping the database in a worker thread; log but do not block startup."""
    try:
        await asyncio.to_thread(_ping_database)
    except Exception as exc:
        app_logger.warning("Database prewarm failed", extra={"error": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Routers are loaded here (after uvicorn says "running") instead of at import time.
    The database connection is pre-warmed so the first availability check is fast.
    """
    from assetdex.core.logger import app_logger

    env_state = get_env_load_state()
    if env_state["warning"]:
        app_logger.warning(
            "Environment file missing",
            extra={"warning": env_state["warning"]},
        )

    startup_start = perf_counter()
    db_task = asyncio.create_task(_prewarm_database(app_logger))
    await _load_routers(app, ROUTER_MODULES, app_logger)

    app_logger.info(
        "AssetDex DCIM API started",
        extra={
            "version": APP_VERSION,
            "startup_ms": round((perf_counter() - startup_start) * 1000, 2),
            "routers_loaded": len(ROUTER_MODULES),
            "environment": settings.ENVIRONMENT,
            "log_level": settings.log_level,
            "log_format": settings.LOG_FORMAT,
            "rack_total_units": settings.RACK_TOTAL_UNITS,
        },
    )

    yield  # App is running

    await db_task
    app_logger.info("AssetDex DCIM API shutting down")


app = FastAPI(
    title="AssetDex DCIM API",
    description="Rack space availability, occupancy and server placement for the AssetDex DCIM inventory",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    default_response_class=PrettyJSONResponse,
    swagger_ui_parameters={"persistAuthorization": True},
)


def custom_openapi():
    """
    Add global Bearer auth header to Swagger / OpenAPI so the token
    can be provided once via the Authorize button and reused.
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    components = openapi_schema.setdefault("components", {})
    components.setdefault("securitySchemes", {})["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": "Use the access token as: `Bearer <JWT_ACCESS_TOKEN>`",
    }
    openapi_schema["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)


@app.get("/")
def read_root():
    return {
        "message": "AssetDex DCIM API is running",
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }


@app.get("/health")
async def health_check():
    """
    Lightweight health probe invoked by uptime monitors.
    Performs a quick DB ping and surfaces runtime metadata.
    """
    try:
        await asyncio.to_thread(_ping_database)
        db_status = "up"
        overall_status = "ok"
    except Exception as exc:
        db_status = f"down ({type(exc).__name__})"
        overall_status = "degraded"

    return {
        "status": overall_status,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
    }
