import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from casesheets.config import settings
from casesheets.exceptions import PayloadError, SheetsServiceError
from casesheets.api.middleware import enforce_body_size, trace_requests
from casesheets.api.routers import cases, system
from casesheets.sheets import SheetsClient, build_sheets_client

logging.basicConfig(level=getattr(logging, settings.logging.level.upper(), logging.INFO))
logger = logging.getLogger("casesheets.api")

INVALID_BODY = "El cuerpo de la petición no es válido."


def create_app(sheets_client: Optional[SheetsClient] = None) -> FastAPI:
    """
    Factory to build the FastAPI application.

    The Sheets client is built once here from GOOGLE_CREDENTIALS unless one is
    passed in (tests pass a fake). Missing or malformed credentials raise
    ConfigError before the app exists.
    """
    if sheets_client is None:
        sheets_client = build_sheets_client(settings)

    app = FastAPI(title="Case Sheets API", version=settings.app.version)
    app.state.sheets_client = sheets_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(enforce_body_size)
    app.middleware("http")(trace_requests)

    app.include_router(system.router)
    app.include_router(cases.router)

    @app.exception_handler(PayloadError)
    async def payload_exception_handler(request: Request, exc: PayloadError):
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Rejected body for %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"message": INVALID_BODY})

    @app.exception_handler(SheetsServiceError)
    async def sheets_exception_handler(request: Request, exc: SheetsServiceError):
        return JSONResponse(status_code=500, content={"message": exc.message, "error": exc.error})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error", extra={"path": str(request.url), "request_id": rid})
        return JSONResponse(status_code=500, content={"message": "Error inesperado del servidor.", "error": str(exc)})

    return app
