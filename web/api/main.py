"""FastAPI site API - auth, admin, cookies, user, applications, debug."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from web.api.admin_routes import router as admin_router
from web.api.application_routes import router as application_router
from web.api.auth_routes import router as auth_router
from web.api.cookie_routes import router as cookie_router
from web.api.debug_routes import router as debug_router
from web.api.user_routes import router as user_router
from web.models import Database

logger = logging.getLogger("kraken.api")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        # Integer parts are list indexes or, for malformed JSON, a byte offset.
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body" and not isinstance(p, int))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Validation failed"
    return JSONResponse({"error": message}, status_code=400)


async def _database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unhandled database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(db: Optional[Database] = None) -> FastAPI:
    """Build the API around a Database. The app owns its lifecycle: tables at startup, dispose at shutdown."""
    db = db or Database(config.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await db.create_all()
        logger.info("API started (environment=%s)", config.ENVIRONMENT)
        yield
        await db.dispose()

    app = FastAPI(title="KrakenGaming API", lifespan=lifespan)
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(SQLAlchemyError, _database_error)

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(application_router)
    app.include_router(cookie_router)
    app.include_router(user_router)
    app.include_router(debug_router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
