"""Routes of the local storage mode: disk files plus the Telegram proxy cache."""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Path, UploadFile, status
from fastapi.responses import FileResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from cloudpdf_api.adapters import LocalCacheOrigin
from cloudpdf_api.dependencies import get_local_origin
from cloudpdf_api.errors import DocumentsApiError, InternalError, ValidationError
from cloudpdf_api.schemas import (
    PDF_CONTENT_TYPE,
    CreatedResponse,
    LocalListEntry,
    OkResponse,
    TelegramUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/list", response_model=List[LocalListEntry])
def list_documents(origin: LocalCacheOrigin = Depends(get_local_origin)):
    """
    List every document.

    Only a safe projection of each record is returned; local paths and
    Telegram file ids stay on the server.
    """
    return origin.list_entries()


@router.get(
    "/api/file/{document_id}",
    response_class=FileResponse,
    responses={
        status.HTTP_200_OK: {
            "description": "The PDF bytes.",
            "content": {PDF_CONTENT_TYPE: {"schema": {"type": "string", "format": "binary"}}},
        },
        status.HTTP_404_NOT_FOUND: {"description": "No document with this id."},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Telegram document but no bot token configured."},
        status.HTTP_501_NOT_IMPLEMENTED: {"description": "The document's source can't be served."},
        status.HTTP_502_BAD_GATEWAY: {"description": "Telegram lookup or download failed."},
    },
)
def get_file(
    document_id: str = Path(..., description="The id of the document to read"),
    origin: LocalCacheOrigin = Depends(get_local_origin),
) -> FileResponse:
    """
    Stream a document.

    Telegram documents that are not cached yet are downloaded to disk first
    and served from there.
    """
    local_file = origin.resolve(document_id)
    return FileResponse(
        local_file.path,
        media_type=PDF_CONTENT_TYPE,
        filename=local_file.filename.replace('"', ""),
        content_disposition_type="inline",
    )


@router.post(
    "/upload",
    response_model=CreatedResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "No file, not a PDF, or too large."}},
)
def upload_document(
    file: Optional[UploadFile] = File(None, description="The PDF to store"),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    origin: LocalCacheOrigin = Depends(get_local_origin),
) -> CreatedResponse:
    """Store an uploaded PDF on disk and list it."""
    if file is None:
        raise ValidationError("No file")

    record = origin.store_upload(
        stream=file.file,
        filename=file.filename,
        content_type=file.content_type,
        title=title,
        category=category,
    )
    return CreatedResponse(id=record["id"])


@router.post("/webhook", response_model=None)
def telegram_webhook(
    payload: Any = Body(None),
    origin: LocalCacheOrigin = Depends(get_local_origin),
) -> OkResponse | PlainTextResponse:
    """
    Receive a Bot API update and record any document it carries.

    Anything without a usable message is acknowledged with 200 so Telegram
    does not keep redelivering it.
    """
    try:
        update = TelegramUpdate.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring unusable webhook update: {e.error_count()} validation error(s)")
        return PlainTextResponse("no message")

    message = update.effective_message
    if message is None:
        return PlainTextResponse("no message")

    try:
        origin.ingest_telegram_message(message)
    except DocumentsApiError:
        raise
    except Exception as e:
        logger.exception(f"webhook error: {e}")
        raise InternalError("webhook failed") from e

    return OkResponse()
