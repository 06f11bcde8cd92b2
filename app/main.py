from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import UserServiceClient
from app.config import settings
from app.database import engine
from app.dependencies import DbSession
from app.errors import SharingError
from app.logger import get_logger, setup_logging
from app.routers import shares, status as status_router

logger = get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; img-src 'self' data: https:; font-src 'self'"
    ),
}


def _error_body(code: str, message: str, **extra) -> dict:
    return {"success": False, "error": {"code": code, "message": message, **extra}}


def register_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(SharingError)
    async def sharing_error_handler(request: Request, exc: SharingError):
        logger.warning(
            "request_rejected",
            code=exc.code,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @application.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ):
        logger.warning("request_invalid", path=request.url.path)
        details = [
            {"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "VALIDATION_ERROR", "Invalid input data", details=details
            ),
        )

    @application.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            body = _error_body("NOT_FOUND", "Route not found")
        else:
            body = _error_body("HTTP_ERROR", str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code, content=body, headers=exc.headers
        )

    @application.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("INTERNAL_ERROR", "Internal server error"),
        )


@asynccontextmanager
async def lifespan(application: FastAPI):
    setup_logging()
    application.state.identity_resolver = UserServiceClient()
    logger.info(
        "service_started",
        service=settings.service_name,
        auth_mode=settings.auth_mode,
    )
    yield
    application.state.identity_resolver.close()
    engine.dispose()
    logger.info("service_stopped", service=settings.service_name)


def create_app() -> FastAPI:
    application = FastAPI(
        title="WatchThis Sharing Service",
        version=settings.service_version,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    register_error_handlers(application)

    application.include_router(status_router.router, prefix=settings.api_prefix)
    application.include_router(shares.router, prefix=settings.api_prefix)

    @application.get("/ping", response_class=PlainTextResponse)
    def ping():
        return f"{settings.service_name} {settings.service_version}"

    @application.get("/health")
    def health(db: DbSession):
        body = {
            "service": settings.service_name,
            "version": settings.service_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            db.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error("health_check_failed", error=str(exc))
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={**body, "status": "unhealthy", "database": "disconnected"},
            )
        return {**body, "status": "healthy", "database": "connected"}

    return application


app = create_app()
