from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.notifications import router as notifications_router
from app.db.base import Base
from app.db.session import get_database_url, get_engine
from app.services.errors import ApiError


def parse_cors_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def should_create_schema() -> bool:
    auto_create_schema = os.getenv("AUTO_CREATE_SCHEMA")
    if auto_create_schema is not None:
        return auto_create_schema == "1"
    return get_database_url().startswith("sqlite")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if should_create_schema():
        Base.metadata.create_all(bind=get_engine())
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="HomeNest Notifications", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(os.getenv("CORS_ORIGINS", "*")),
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.code, "message": exc.message}},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "REQUEST_VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": exc.errors(),
                }
            },
        )

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(notifications_router)
    return app


app = create_app()
