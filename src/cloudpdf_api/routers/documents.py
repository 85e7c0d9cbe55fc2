"""Routes shared by both storage modes."""

from fastapi import APIRouter, Depends, Path, status

from cloudpdf_api.adapters import FileOrigin
from cloudpdf_api.dependencies import get_origin
from cloudpdf_api.schemas import OkResponse

router = APIRouter()

NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {"description": "No document with this id."},
}


@router.delete("/api/delete/{document_id}", response_model=OkResponse, responses=NOT_FOUND_RESPONSE)
def delete_document(
    document_id: str = Path(..., description="The id of the document to delete"),
    origin: FileOrigin = Depends(get_origin),
) -> OkResponse:
    """Delete a document and, best effort, the stored file behind it."""
    origin.delete(document_id)
    return OkResponse()
