"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.userhub.api.http.app_data import ApplicationDependencies
from src.userhub.api.http.routers.auth import router as auth_router
from src.userhub.api.http.routers.health import router as health_router
from src.userhub.api.http.routers.users import router as users_router
from src.userhub.api.http.schemas import error_body
from src.userhub.api.utils.app_startup import configure_logging
from src.userhub.core import messages
from src.userhub.core.cache import ReadThroughCache
from src.userhub.core.services import (
    CredentialHasher,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)
from src.userhub.core.storage import LocalFileStorage
from src.userhub.runtime.context import get_config

# Initialize logging
configure_logging()


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Allow FastAPI to run startup/shutdown routines once per process

    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="userhub",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
if get_config().app.environment == "production" and (
    "*" in get_config().app.cors.origins
):
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            # Attach correlation id
            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            body = error_body(500, "Internal Server Error")
            body["id"] = request_id
            return JSONResponse(
                status_code=500,
                content=body,
                headers={"X-Request-ID": request_id},
            )


# --- Error envelopes ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.bind(status_code=422).info("request.validation_error")
    return JSONResponse(
        status_code=422,
        content=error_body(
            422, messages.INVALID_REQUEST, data=jsonable_encoder(exc.errors())
        ),
    )


# --- Router registration ---
app.include_router(health_router)
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")

# --- Stored uploads ---
_uploads = get_config().uploads
app.mount(
    f"/{_uploads.static_mount.strip('/')}",
    StaticFiles(
        directory=Path(_uploads.root_dir) / _uploads.static_mount, check_dir=False
    ),
    name="uploads",
)


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService()
    database_service.create_all()

    deps = ApplicationDependencies(
        database_service=database_service,
        cache=ReadThroughCache(max_entries=config.cache.max_entries),
        file_storage=LocalFileStorage.from_config(config.uploads),
        hasher=CredentialHasher(rounds=config.users.bcrypt_rounds),
        jwt_generation_service=JwtGeneratorService(),
        jwt_verify_service=JwtVerificationService(),
    )
    app.state.app_dependencies = deps

    if not config.jwt.secret:
        logger.warning("jwt.secret is not configured; login and protected routes will fail")


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    app_dependencies.database_service.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
