from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pcms.api.v1.api import api_router
from pcms.core.config import settings
from pcms.core.exceptions import (
    BaseCustomException,
    ValidationError,
    collect_validation_errors,
    create_error_response,
    create_validation_error_response,
)
from pcms.infrastructure.database import init_db, close_db

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database initialised")
    yield
    await close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(BaseCustomException)
async def custom_exception_handler(request: Request, exc: BaseCustomException):
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(message="Invalid request parameters")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_validation_error_response(error, collect_validation_errors(exc.errors())),
    )


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "Healthy"}
