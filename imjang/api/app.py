"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from imjang.api.deps import get_engine
from imjang.api.routes import loan, market, records, search
from imjang.api.schemas import ErrorResponse
from imjang.config import settings
from imjang.data.cache import close_redis
from imjang.data.side_channel import side_channel
from imjang.models.db import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.storage_backend == "sql":
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Imjang API started (storage=%s)", settings.storage_backend)
    yield
    await side_channel.drain()
    await close_redis()


app = FastAPI(
    title="Imjang",
    description="House-hunting field survey records and loan calculator",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    404: "Not Found",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _problem(status_code: int, detail: str, request: Request) -> JSONResponse:
    body = ErrorResponse(
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request.headers.get("x-request-id", str(uuid.uuid4())),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = _problem(exc.status_code, str(exc.detail), request)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _problem(422, str(exc.errors()), request)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _problem(500, "An unexpected error occurred.", request)


app.include_router(loan.router)
app.include_router(records.router)
app.include_router(market.router)
app.include_router(search.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
