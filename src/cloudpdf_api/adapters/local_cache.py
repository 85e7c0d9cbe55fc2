"""
Local disk origin with an on-demand cache for Telegram-hosted files.

A Telegram record starts out uncached. The first read resolves its file_id
through the Bot API, downloads the file into the storage directory and
records ``localPath``/``cachedAt``, so later reads are served from disk.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Dict, Iterator, Optional

from cloudpdf_api.adapters.base import FileOrigin, new_document_id, now_ms
from cloudpdf_api.config.settings import Settings
from cloudpdf_api.database.local import MetadataStore, Record
from cloudpdf_api.errors import (
    ConfigurationError,
    InternalError,
    UnsupportedSourceError,
    ValidationError,
)
from cloudpdf_api.schemas import (
    DEFAULT_CATEGORY,
    PDF_CONTENT_TYPE,
    TELEGRAM_CATEGORY,
    DocumentRecord,
    LocalListEntry,
    Source,
    TelegramMessage,
)
from cloudpdf_api.telegram.client import TelegramClient

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024


@dataclass
class LocalFile:
    path: Path
    filename: str


def download_name(record: Record) -> str:
    return record.get("title") or record.get("name") or f"{record['id']}.pdf"


class LocalCacheOrigin(FileOrigin):
    mode = "local"
    list_entry_model = LocalListEntry

    def __init__(
        self,
        store: MetadataStore,
        settings: Settings,
        telegram: Optional[TelegramClient] = None,
    ):
        super().__init__(store, settings)
        self.storage_dir = Path(settings.storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        if telegram is None and settings.bot_token:
            telegram = TelegramClient(
                bot_token=settings.bot_token,
                api_base=settings.telegram_api_base,
                timeout=settings.telegram_timeout,
            )
        self.telegram = telegram

        self._download_locks: Dict[str, threading.Lock] = {}
        self._download_locks_guard = threading.Lock()

    @contextmanager
    def _download_lock(self, document_id: str) -> Iterator[None]:
        """Serialize cache population per document so concurrent readers share one download."""
        with self._download_locks_guard:
            lock = self._download_locks.setdefault(document_id, threading.Lock())
        with lock:
            yield

    @staticmethod
    def _cached_path(record: Record) -> Optional[Path]:
        local_path = record.get("localPath")
        if local_path and Path(local_path).is_file():
            return Path(local_path)
        return None

    def resolve(self, document_id: str) -> LocalFile:
        record = self.get(document_id)
        path = self._cached_path(record)

        if path is None:
            if record.get("source") == Source.TELEGRAM.value:
                path = self._fetch_from_telegram(document_id)
            else:
                raise UnsupportedSourceError(source=record.get("source"))

        return LocalFile(path=path, filename=download_name(record))

    def _fetch_from_telegram(self, document_id: str) -> Path:
        if self.telegram is None:
            raise ConfigurationError("Server missing BOT_TOKEN for Telegram")

        with self._download_lock(document_id):
            # Another request may have finished the download while we waited
            record = self.get(document_id)
            cached = self._cached_path(record)
            if cached is not None:
                return cached
            return self._cache_telegram_file(record)

    def _cache_telegram_file(self, record: Record) -> Path:
        file_id = record.get("file_id")
        if not file_id:
            raise InternalError("Telegram record has no file_id")

        file_path = self.telegram.get_file_path(file_id)
        destination = self.storage_dir / f"{record['id']}-{PurePosixPath(file_path).name}"
        self.telegram.download_file(file_path, destination)

        self.store.update(record["id"], {"localPath": str(destination), "cachedAt": now_ms()})
        logger.info(f"Cached Telegram file for {record['id']} at {destination}")
        return destination

    def delete(self, document_id: str) -> None:
        record = self.get(document_id)

        local_path = record.get("localPath")
        if local_path:
            try:
                Path(local_path).unlink()
            except FileNotFoundError:
                logger.info(f"File for {document_id} was already gone: {local_path}")
            except OSError as e:
                logger.warning(f"Failed to unlink {local_path}: {e}")

        self.store.remove(document_id)
        with self._download_locks_guard:
            self._download_locks.pop(document_id, None)

    def store_upload(
        self,
        stream: BinaryIO,
        filename: Optional[str],
        content_type: Optional[str],
        title: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Record:
        """Persist an uploaded PDF and create its record."""
        if content_type != PDF_CONTENT_TYPE:
            raise ValidationError("Only PDFs allowed", contentType=content_type)

        document_id = new_document_id()
        extension = PurePosixPath(filename or "").suffix or ".pdf"
        destination = self.storage_dir / f"{document_id}{extension}"

        size = self._write_upload(stream, destination)
        record = DocumentRecord(
            id=document_id,
            source=Source.UPLOAD,
            name=filename,
            title=title or filename,
            category=category or DEFAULT_CATEGORY,
            date=now_ms(),
            size=size,
            local_path=str(destination),
        ).to_document()

        try:
            self.store.add(record)
        except Exception:
            destination.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload {document_id} ({size} bytes) at {destination}")
        return record

    def _write_upload(self, stream: BinaryIO, destination: Path) -> int:
        limit = self.settings.max_upload_bytes
        written = 0
        try:
            with open(destination, "wb") as out:
                while chunk := stream.read(UPLOAD_CHUNK_SIZE):
                    written += len(chunk)
                    if written > limit:
                        raise ValidationError("File too large", maxBytes=limit)
                    out.write(chunk)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise
        return written

    def ingest_telegram_message(self, message: TelegramMessage) -> Optional[str]:
        """Record a document posted to the bot; returns the new id, or None if the message has no document."""
        document = message.document
        if document is None:
            return None

        document_id = new_document_id()
        record = DocumentRecord(
            id=document_id,
            source=Source.TELEGRAM,
            file_id=document.file_id,
            name=document.file_name or "telegram_file.pdf",
            title=document.file_name or f"Telegram {document_id}",
            category=TELEGRAM_CATEGORY,
            date=now_ms(),
            size=document.file_size or None,
        ).to_document()
        self.store.add(record)
        logger.info(f"Registered Telegram document {document_id}")

        # A failed pre-cache leaves the record uncached; resolve() retries later
        if self.settings.cache_telegram_files and self.telegram is not None:
            try:
                with self._download_lock(document_id):
                    self._cache_telegram_file(record)
            except Exception as e:
                logger.warning(f"Pre-cache of {document_id} failed: {e}")

        return document_id
