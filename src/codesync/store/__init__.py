"""Document store implementations."""

from codesync.store.base import DocumentStore
from codesync.store.memory import MemoryDocumentStore
from codesync.store.sql import SqlDocumentStore

__all__ = ["DocumentStore", "MemoryDocumentStore", "SqlDocumentStore"]
