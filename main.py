import time
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import RecordStore, connect
from errors import AppError, ConfigurationError, ValidationError
from log import configure_logging, get_logger
from routes import ROUTERS
from settings import DEV_JWT_SECRET, Settings, get_settings

logger = get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


def _field_errors(errors) -> list:
    out = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query", "header")]
        out.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return out


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    settings = settings or get_settings()
    if not settings.is_development and settings.jwt_secret == DEV_JWT_SECRET:
        raise ConfigurationError("JWT_SECRET must be set outside development")

    configure_logging(settings.is_development)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = connect(settings)
        app.state.store.ensure_indexes()
        yield
        if owns_store:
            app.state.store.close()

    app = FastAPI(title="Budget API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = _internal_error(request, exc, settings)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        content = {"message": exc.message}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return await handle_app_error(request, ValidationError(_field_errors(exc.errors())))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        message = "Resource not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"message": message},
                            headers=getattr(exc, "headers", None))

    @app.get("/")
    def root():
        return {"status": "ok", "service": "Budget API"}

    @app.get("/health")
    def health(request: Request):
        response = {
            "backend": "running",
            "database": "not available",
            "database_name": None,
        }
        db = request.app.state.store
        if db is not None:
            try:
                db.ping()
                response["database"] = "connected"
                response["database_name"] = db.name
            except Exception as e:
                logger.warning("database_ping_failed", error=str(e))
                response["database"] = "error"
        return response

    for router in ROUTERS:
        app.include_router(router)

    return app


def _internal_error(request: Request, exc: Exception, settings: Settings) -> JSONResponse:
    logger.error("unhandled_error", method=request.method, path=request.url.path, exc_info=exc)
    content = {"message": "An unexpected error occurred"}
    if settings.is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
