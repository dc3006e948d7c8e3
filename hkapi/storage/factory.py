"""Document store factory with singleton pattern for connection management."""

import asyncio
import threading
from typing import Optional

from loguru import logger

from hkapi.constants import Database as DbConstants
from hkapi.core.config import get_settings
from hkapi.core.exceptions import ConfigurationError
from hkapi.storage.base import DocumentStore
from hkapi.storage.memory import InMemoryDocumentStore
from hkapi.storage.postgres import PostgresDocumentStore


def create_store(database_url: str, pool_size: int = 10) -> DocumentStore:
    """
    Build the store implementation matching a URL.

    Args:
        database_url: postgresql:// URL or memory://
        pool_size: Connection pool size for PostgreSQL

    Returns:
        Unconnected DocumentStore

    Raises:
        ConfigurationError: If the URL scheme is not supported
    """
    if database_url == DbConstants.MEMORY_URL:
        return InMemoryDocumentStore(auto_connect=False)
    if not database_url.startswith(("postgresql://", "postgres://")):
        raise ConfigurationError(f"Unsupported database URL scheme: {database_url.split(':', 1)[0]}")
    return PostgresDocumentStore(database_url=database_url, pool_size=pool_size)


class DocumentStoreFactory:
    """
    Singleton factory for the process-wide document store.

    Example:
        ```python
        store = await DocumentStoreFactory.ensure_connected()
        ...
        await DocumentStoreFactory.close_instance()
        ```
    """

    _instance: Optional[DocumentStore] = None
    _async_lock: Optional[asyncio.Lock] = None
    _class_lock = threading.Lock()

    @classmethod
    def _get_async_lock(cls) -> asyncio.Lock:
        """Get or create the async lock (lazy initialization for event loop safety)."""
        with cls._class_lock:
            if cls._async_lock is None:
                cls._async_lock = asyncio.Lock()
        return cls._async_lock

    @classmethod
    def get_instance(cls) -> DocumentStore:
        """
        Get document store singleton instance, built from settings on first call.

        Returns:
            DocumentStore singleton instance
        """
        with cls._class_lock:
            if cls._instance is None:
                settings = get_settings()
                cls._instance = create_store(settings.database_url, settings.db_pool_size)
                logger.info(f"Created document store singleton ({type(cls._instance).__name__})")
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """
        Reset singleton instance (useful for testing).

        Does NOT close the existing store.
        """
        with cls._class_lock:
            cls._instance = None
            cls._async_lock = None

    @classmethod
    async def ensure_connected(cls) -> DocumentStore:
        """
        Get store instance and ensure it's connected.

        Returns:
            Connected document store
        """
        async with cls._get_async_lock():
            store = cls.get_instance()
            if not store.is_connected:
                await store.connect()
            return store

    @classmethod
    async def close_instance(cls) -> None:
        """Close and forget the singleton store (application shutdown)."""
        async with cls._get_async_lock():
            if cls._instance is not None:
                instance_to_close = cls._instance
                cls._instance = None
                await instance_to_close.close()
                logger.info("Closed and reset document store singleton instance")
