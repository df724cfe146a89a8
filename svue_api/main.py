# svue_api/main.py
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from svue_api.api.health import router as health_router
from svue_api.api.studentvue import SET_TOKEN_HEADER, router as studentvue_router
from svue_api.core.config import settings
from svue_api.core.errors import (
    ApiError,
    api_error_handler,
    http_exception_handler,
    validation_exception_handler,
)
from svue_api.core.logging import setup_logging
from svue_api.middlewares.logging import LoggingMiddleware
from svue_api.middlewares.request_id import request_id_middleware

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # shared client for non-session lookups (version key); SOAP calls use their own
    http_client = httpx.AsyncClient(timeout=5.0)
    app.state.http_client = http_client
    yield
    await http_client.aclose()


app = FastAPI(
    title="StudentVue JSON API",
    lifespan=lifespan,
)

# middleware (last added runs outermost)
app.add_middleware(LoggingMiddleware)
app.middleware("http")(request_id_middleware)
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SET_TOKEN_HEADER],
)

# exception handlers
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# routers
app.include_router(health_router)
app.include_router(studentvue_router)


@app.get("/health")
async def health():
    return {"status": "ok", "message": "StudentVue API is running!"}


def run() -> None:
    uvicorn.run("svue_api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
