"""Routes of the presigned storage mode: the bucket holds the bytes, the API hands out URLs."""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from cloudpdf_api.adapters import PresignedOrigin
from cloudpdf_api.dependencies import get_presigned_origin
from cloudpdf_api.schemas import (
    CreatedResponse,
    FileUrlResponse,
    PresignedListEntry,
    RegisterRequest,
    UploadGrant,
    UploadUrlRequest,
)

router = APIRouter()


@router.post(
    "/api/get-upload-url",
    response_model=UploadGrant,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "filename missing."}},
)
def get_upload_url(
    body: UploadUrlRequest,
    origin: PresignedOrigin = Depends(get_presigned_origin),
) -> UploadGrant:
    """
    Hand out a presigned PUT for a new object.

    Nothing is listed until the client calls `POST /api/register` with the
    returned key.
    """
    return origin.create_upload_grant(body.filename, body.content_type)


@router.post(
    "/api/register",
    response_model=CreatedResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "key or title missing."}},
)
def register_document(
    body: RegisterRequest,
    origin: PresignedOrigin = Depends(get_presigned_origin),
) -> CreatedResponse:
    """Record an object uploaded through a presigned PUT."""
    record = origin.register(
        key=body.key,
        title=body.title,
        category=body.category,
        size=body.size,
        document_id=body.id,
    )
    return CreatedResponse(id=record["id"])


@router.get("/api/list", response_model=List[PresignedListEntry])
def list_documents(origin: PresignedOrigin = Depends(get_presigned_origin)):
    """List every registered document."""
    return origin.list_entries()


@router.get(
    "/api/file/{document_id}",
    response_model=FileUrlResponse,
    responses={status.HTTP_404_NOT_FOUND: {"description": "No document with this id."}},
)
def get_file_url(
    document_id: str = Path(..., description="The id of the document to read"),
    origin: PresignedOrigin = Depends(get_presigned_origin),
) -> FileUrlResponse:
    """Return a short-lived download URL; the client fetches the bytes from the bucket."""
    return origin.resolve(document_id)
