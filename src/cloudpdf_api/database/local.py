"""
Flat-file metadata store.

The whole record set lives in one JSON document, ``{"items": [...]}``. Every
mutation is a full load-modify-save; nothing is cached between calls, so two
writers racing on the same file can lose each other's changes.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
RecordSet = Dict[str, List[Record]]


def empty_record_set() -> RecordSet:
    return {"items": []}


class MetadataStore(ABC):
    """Record set keyed by ``id`` with derived CRUD helpers.

    Subclasses only provide ``load`` and ``save``.
    """

    @abstractmethod
    def load(self) -> RecordSet:
        """Return the full record set."""

    @abstractmethod
    def save(self, record_set: RecordSet) -> None:
        """Replace the full record set."""

    def list(self) -> List[Record]:
        return self.load()["items"]

    def find(self, record_id: str) -> Optional[Record]:
        for record in self.load()["items"]:
            if record.get("id") == record_id:
                return record
        return None

    def add(self, record: Record) -> None:
        record_set = self.load()
        if any(item.get("id") == record["id"] for item in record_set["items"]):
            raise ValueError(f"Record {record['id']} already exists")
        record_set["items"].append(record)
        self.save(record_set)

    def upsert(self, record: Record) -> None:
        """Replace the record with the same id in place, or append it."""
        record_set = self.load()
        items = record_set["items"]
        for index, item in enumerate(items):
            if item.get("id") == record["id"]:
                items[index] = record
                break
        else:
            items.append(record)
        self.save(record_set)

    def update(self, record_id: str, patch: Dict[str, Any]) -> bool:
        """Shallow-merge ``patch`` into the matching record.

        An unknown id leaves the store untouched and returns False.
        """
        record_set = self.load()
        matched = False
        for item in record_set["items"]:
            if item.get("id") == record_id:
                item.update(patch)
                matched = True
        if matched:
            self.save(record_set)
        return matched

    def remove(self, record_id: str) -> bool:
        record_set = self.load()
        remaining = [item for item in record_set["items"] if item.get("id") != record_id]
        removed = len(remaining) != len(record_set["items"])
        record_set["items"] = remaining
        self.save(record_set)
        return removed


class JsonFileStore(MetadataStore):
    """Metadata kept in a pretty-printed JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> RecordSet:
        # Absent or unreadable files are treated as an empty store, which is a
        # valid initial state.
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return empty_record_set()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Metadata file {self.path} is not valid JSON ({e}); starting empty")
            return empty_record_set()

        if not isinstance(data, dict) or not isinstance(data.get("items", []), list):
            logger.warning(f"Metadata file {self.path} has an unexpected shape; starting empty")
            return empty_record_set()

        items = data.setdefault("items", [])
        records = [item for item in items if isinstance(item, dict)]
        if len(records) != len(items):
            logger.warning(f"Metadata file {self.path} has {len(items) - len(records)} non-object item(s); skipping them")
            data["items"] = records
        return data

    def save(self, record_set: RecordSet) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        serialized = json.dumps(record_set, indent=2, ensure_ascii=False)

        # Write next to the target and swap it in so readers never see half a file
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(serialized)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class InMemoryStore(MetadataStore):
    """Process-local store, used by tests and throwaway runs."""

    def __init__(self, items: Optional[List[Record]] = None):
        self._record_set: RecordSet = {"items": copy.deepcopy(items or [])}

    def load(self) -> RecordSet:
        return copy.deepcopy(self._record_set)

    def save(self, record_set: RecordSet) -> None:
        self._record_set = copy.deepcopy(record_set)
