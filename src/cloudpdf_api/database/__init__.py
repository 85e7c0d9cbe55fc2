"""Metadata persistence for document records."""

from cloudpdf_api.database.local import InMemoryStore, JsonFileStore, MetadataStore

__all__ = ["InMemoryStore", "JsonFileStore", "MetadataStore"]
