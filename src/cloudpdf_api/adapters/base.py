"""Shared pieces of the file origin adapters."""

import secrets
import string
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Type

from pydantic import BaseModel

from cloudpdf_api.config.settings import Settings
from cloudpdf_api.database.local import MetadataStore, Record
from cloudpdf_api.errors import NotFoundError

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def new_document_id() -> str:
    """Time-ordered id such as ``lx2k9q1c-4f0a9zk2``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"{to_base36(now_ms())}-{suffix}"


class FileOrigin(ABC):
    """Turns document records into bytes the client can read.

    One concrete origin is chosen at startup from ``Settings.storage_mode``.
    """

    mode: ClassVar[str]
    list_entry_model: ClassVar[Type[BaseModel]]

    def __init__(self, store: MetadataStore, settings: Settings):
        self.store = store
        self.settings = settings

    def get(self, document_id: str) -> Record:
        record = self.store.find(document_id)
        if record is None:
            raise NotFoundError()
        return record

    def list_entries(self) -> List[BaseModel]:
        """Safe projection of every record for `GET /api/list`."""
        return [self.list_entry_model.from_document(record) for record in self.store.list()]

    @abstractmethod
    def resolve(self, document_id: str) -> Any:
        """Produce what the client needs to read the document."""

    @abstractmethod
    def delete(self, document_id: str) -> None:
        """Remove the record and, best effort, the bytes behind it."""
