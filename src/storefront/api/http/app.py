"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.storefront.api.http.app_data import ApplicationDependencies
from src.storefront.api.http.middleware.limiter import (
    close_rate_limiter,
    configure_rate_limiter,
)
from src.storefront.api.http.middleware.request_context import (
    request_context,
    request_id_of,
    security_headers,
)
from src.storefront.api.http.routers import auth, health
from src.storefront.api.http.routers.service import cart, order, payment, product, report, review
from src.storefront.api.utils.app_startup import configure_logging
from src.storefront.core.errors import StorefrontError
from src.storefront.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    PayPalClient,
    VNPayService,
)
from src.storefront.runtime.context import get_config

DEV_SIGNING_SECRET = "dev-storefront-signing-secret"

configure_logging()


def build_dependencies(
    database_service: DbSessionService | None = None,
) -> ApplicationDependencies:
    """Create the application-wide services from the current configuration."""
    config = get_config()
    return ApplicationDependencies(
        database_service=database_service or DbSessionService(),
        jwt_verify_service=JwtVerificationService(),
        jwt_generation_service=JwtGeneratorService(),
        paypal_client=PayPalClient(config.payment.paypal),
        vnpay_service=VNPayService(config.payment.vnpay),
    )


async def startup() -> None:
    config = get_config()
    logger.info("Starting storefront API in {} environment", config.app.environment)

    if config.jwt.signing_secret == DEV_SIGNING_SECRET:
        if config.app.environment == "production":
            raise RuntimeError("JWT signing secret must be set in production")
        logger.warning("Using the development JWT signing secret")

    deps = build_dependencies()
    if config.database.auto_create:
        DbManageService(deps.database_service.engine).create_all()
    app.state.app_dependencies = deps
    configure_rate_limiter()


async def shutdown() -> None:
    logger.info("Stopping storefront API")
    await close_rate_limiter()
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is not None:
        deps.database_service.engine.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


def _create_app() -> FastAPI:
    config = get_config()
    public_docs = config.app.environment != "production"
    cors = config.app.cors
    if not public_docs and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError("CORS origin '*' cannot be combined with credentials in production")

    application = FastAPI(
        title="Storefront API",
        lifespan=lifespan,
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
    )
    application.middleware("http")(security_headers)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    # Outermost middleware.
    application.middleware("http")(request_context)
    return application


app = _create_app()


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.bind(status_code=exc.status_code, error_type=type(exc).__name__).info(
        "request.rejected: {}", exc.message
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "request_id": request_id_of(request)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "request_id": request_id_of(request)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.bind(status_code=422).info("request.validation_error")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "request_id": request_id_of(request)},
    )


app.include_router(health.router)

api_router = APIRouter(prefix="/api")
for module in (auth, product, review, cart, order, report, payment):
    api_router.include_router(module.router)
api_router.include_router(order.admin_router)
app.include_router(api_router)

__all__ = ["app", "build_dependencies", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # request_context logs every request
    )
