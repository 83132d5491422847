import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cupos_admin.core.errors import CuposError
from cupos_admin.core.settings import settings, validate_settings
from cupos_admin.db.column_resolver import resolve_schema
from cupos_admin.db.session import engine
from cupos_admin.models import Base
from cupos_admin.routers.catalog import router as catalog_router
from cupos_admin.routers.cupos import router as cupos_router
from cupos_admin.routers.reports import router as reports_router

app = FastAPI(title="Cupos Admin API", version="0.1.0")
logger = logging.getLogger("cupos_admin.startup")
error_logger = logging.getLogger("cupos_admin.errors")


@app.exception_handler(CuposError)
async def cupos_error_handler(request: Request, exc: CuposError):
    if exc.status_code >= 500:
        error_logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Solicitud inválida"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = request.headers.get("x-request-id")
    error_logger.exception(
        "Unhandled server error on %s %s", request.method, request.url.path,
        extra={"request_id": request_id},
    )
    payload = {"error": str(exc) or "Error interno"}
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=500, content=payload)


@app.on_event("startup")
def startup():
    validate_settings(settings)
    if settings.bootstrap_schema:
        Base.metadata.create_all(bind=engine)
        logger.info("Reference tables ensured (BOOTSTRAP_SCHEMA=true).")
    if settings.resolve_schema_on_startup:
        app.state.schema = resolve_schema(engine)
    else:
        logger.info("Schema resolution deferred to first request.")


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(catalog_router)
app.include_router(cupos_router)
app.include_router(reports_router)
