"""Document store contract and implementations."""

from .base import SERVER_TIMESTAMP, Document, DocumentStore, Filter
from .factory import DocumentStoreFactory, create_store
from .memory import InMemoryDocumentStore
from .postgres import PostgresDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "Document",
    "DocumentStore",
    "Filter",
    "DocumentStoreFactory",
    "create_store",
    "InMemoryDocumentStore",
    "PostgresDocumentStore",
]
