"""
FastAPI application factory for the task board backend.

Run with ``taskboard`` (see taskboard.main) or
``uvicorn --factory taskboard.app:create_app``. Either way the task store is
pinged during startup and an unreachable database aborts the process.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from taskboard.config import get_settings
from taskboard.dependencies import get_task_store
from taskboard.routes import health_router, router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # StoreError propagates so the server never starts serving.
    provider = app.dependency_overrides.get(get_task_store, get_task_store)
    store = provider()
    await run_in_threadpool(store.ping)
    yield


def _describe_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}")
    return "; ".join(messages) or "Invalid request"


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400, content={"error": _describe_validation_error(exc)}
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Taskboard Backend (FastAPI)", version="0.1.0", lifespan=lifespan
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=settings.cors_max_age,
    )
    app.add_exception_handler(
        RequestValidationError, request_validation_error_handler
    )
    app.include_router(health_router)
    app.include_router(router, prefix=settings.api_prefix)
    return app
