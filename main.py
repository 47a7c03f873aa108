from http import HTTPStatus

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from config import HOST, PORT, catalog_config
from s3deck.controllers.v1.bucket_config.bucket_config import router as bucket_config_router
from s3deck.controllers.v1.objects.objects import router as objects_router
from s3deck.controllers.v1.upload.upload import router as upload_router
from s3deck.database.catalog import BucketCatalog
from s3deck.utils.errors import SidecarError
from s3deck.utils.logger_utils import logger

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""

    # Startup
    logger.info("🚀 Starting up the S3 Deck sidecar...")
    catalog = BucketCatalog(catalog_config["CATALOG_FILE"])
    try:
        catalog.load()
    except Exception as e:
        logger.critical(f"Unable to load bucket catalog from {catalog.path}: {e}")
        raise
    app.state.catalog = catalog

    yield

    # Shutdown
    logger.info("🛑 Shutting down the S3 Deck sidecar...")

# Create FastAPI application
app = FastAPI(title="S3 Deck Sidecar", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": HTTPStatus(status_code).phrase, "message": message},
    )


@app.exception_handler(SidecarError)
async def sidecar_error_handler(request: Request, exc: SidecarError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.kind.value}): {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        message = "Invalid JSON"
    else:
        message = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in errors
        )
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return error_response(HTTPStatus.BAD_REQUEST, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))


# Routers
app.include_router(bucket_config_router, tags=["Bucket Config"])
app.include_router(objects_router, tags=["Objects"])
app.include_router(upload_router, tags=["Upload"])


def run():
    logger.info(f"S3 Deck sidecar listening on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
