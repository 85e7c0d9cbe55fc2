import logging
from textwrap import dedent
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from cloudpdf_api.adapters import PresignedOrigin, build_origin
from cloudpdf_api.config.settings import Settings, get_settings
from cloudpdf_api.database.local import JsonFileStore, MetadataStore
from cloudpdf_api.errors import (
    DocumentsApiError,
    handle_broad_exceptions,
    handle_documents_api_errors,
    handle_request_validation_errors,
)
from cloudpdf_api.routers.documents import router as documents_router
from cloudpdf_api.routers.health import router as health_router
from cloudpdf_api.routers.local import router as local_router
from cloudpdf_api.routers.presigned import router as presigned_router
from cloudpdf_api.telegram.client import TelegramClient

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MetadataStore] = None,
    telegram: Optional[TelegramClient] = None,
    s3_client: Optional["S3Client"] = None,
) -> FastAPI:
    """Create a FastAPI application.

    Collaborators left as None are built from ``settings``; tests pass their
    own store, Telegram client or S3 client instead.
    """
    settings = settings or get_settings()
    store = store or JsonFileStore(settings.db_file)

    app = FastAPI(
        title="CloudPDF API",
        summary="List, serve and ingest PDFs for the CloudPDF viewer",
        version="v1",
        description=dedent(
            """\
        Two storage modes share this API:

        | Mode | Files live in | `GET /api/file/{id}` returns |
        | --- | --- | --- |
        | `local` | the storage directory (Telegram files are cached there on first read) | the PDF bytes |
        | `presigned` | an S3 bucket | a short-lived download URL |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.origin = build_origin(settings, store, telegram=telegram, s3_client=s3_client)

    app.include_router(health_router, tags=["health"])
    app.include_router(documents_router, tags=["documents"])
    if isinstance(app.state.origin, PresignedOrigin):
        app.include_router(presigned_router, tags=["documents"])
    else:
        app.include_router(local_router, tags=["documents"])

    app.add_exception_handler(DocumentsApiError, handle_documents_api_errors)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"CloudPDF API ready in {settings.storage_mode} mode")
    if settings.storage_mode == "local":
        if settings.telegram_enabled:
            logger.info("BOT_TOKEN is set (Telegram enabled)")
        else:
            logger.info("BOT_TOKEN not set (Telegram disabled)")

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
