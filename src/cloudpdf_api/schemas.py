####################################
# --- Request/response schemas --- #
####################################

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CATEGORY = "Uncategorized"
TELEGRAM_CATEGORY = "Telegram"
PDF_CONTENT_TYPE = "application/pdf"


class Source(str, Enum):
    """Where the bytes of a document originate."""
    UPLOAD = "upload"
    TELEGRAM = "telegram"
    S3 = "s3"


class DocumentRecord(BaseModel):
    """One entry of the metadata file.

    Field names are snake_case in Python and camelCase on disk, matching what
    the viewer frontend has always read. Unknown keys are kept as-is.
    """
    id: str
    title: Optional[str] = None
    name: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    source: Source
    date: int = Field(description="Creation time in epoch milliseconds.")
    size: Optional[int] = None
    local_path: Optional[str] = Field(None, alias="localPath")
    file_id: Optional[str] = None
    key: Optional[str] = None
    cached_at: Optional[int] = Field(None, alias="cachedAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow", use_enum_values=True)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for the metadata store, leaving out fields that are unset."""
        document = self.model_dump(by_alias=True, exclude_none=True)
        # size is meaningful as an explicit null
        document.setdefault("size", None)
        return document


class LocalListEntry(BaseModel):
    """Item of `GET /api/list` in local mode."""
    id: Optional[str] = None
    title: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    date: Optional[int] = None
    source: str = Source.UPLOAD.value
    size: Optional[int] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "LocalListEntry":
        return cls(
            id=document.get("id"),
            title=document.get("title") or document.get("name"),
            name=document.get("name"),
            category=document.get("category"),
            date=document.get("date"),
            source=document.get("source") or Source.UPLOAD.value,
            size=document.get("size") or None,
        )


class PresignedListEntry(BaseModel):
    """Item of `GET /api/list` in presigned mode."""
    id: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    key: Optional[str] = None
    size: Optional[int] = None
    date: Optional[int] = None
    source: str = Source.S3.value

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "PresignedListEntry":
        return cls(
            id=document.get("id"),
            title=document.get("title"),
            category=document.get("category"),
            key=document.get("key"),
            size=document.get("size"),
            date=document.get("date"),
            source=document.get("source") or Source.S3.value,
        )


class OkResponse(BaseModel):
    ok: bool = True


class CreatedResponse(OkResponse):
    """Response of the endpoints that create a document."""
    id: str = Field(description="Identifier of the new document.")


class UploadUrlRequest(BaseModel):
    """Body of `POST /api/get-upload-url`."""
    filename: Optional[str] = None
    content_type: Optional[str] = Field(None, alias="contentType")

    model_config = ConfigDict(populate_by_name=True)


class UploadGrant(BaseModel):
    """A presigned PUT the client uses to upload directly to the bucket."""
    upload_url: str = Field(alias="uploadUrl")
    key: str
    content_type: str = Field(alias="contentType")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "uploadUrl": "https://cloudpdf-documents.s3.amazonaws.com/uploads/lx2k9q1c-report.pdf?X-Amz-Signature=...",
                "key": "uploads/lx2k9q1c-report.pdf",
                "contentType": "application/pdf",
            }
        },
    )


class RegisterRequest(BaseModel):
    """Body of `POST /api/register`."""
    key: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    size: Optional[int] = Field(None, ge=0)
    id: Optional[str] = None


class FileUrlResponse(BaseModel):
    """Short-lived download URL for a document."""
    url: str
    expires_in: int = Field(alias="expiresIn")

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    ok: bool = True
    storage_mode: str = Field(alias="storageMode")
    telegram: bool = Field(description="Whether a bot token is configured.")

    model_config = ConfigDict(populate_by_name=True)


class TelegramDocument(BaseModel):
    file_id: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class TelegramMessage(BaseModel):
    document: Optional[TelegramDocument] = None

    model_config = ConfigDict(extra="allow")


class TelegramUpdate(BaseModel):
    """The subset of a Bot API `Update` the webhook cares about."""
    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None
    channel_post: Optional[TelegramMessage] = None

    model_config = ConfigDict(extra="allow")

    @property
    def effective_message(self) -> Optional[TelegramMessage]:
        return self.message or self.channel_post
