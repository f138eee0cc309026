"""
Storage abstractions.

- DocumentStore → remote realtime database (RealtimeDatabaseStore)
  or an in-memory tree (InMemoryDocumentStore) for development
"""

import logging

from tapvote.config import Settings
from tapvote.storage.base import DocumentStore, Paths, StoreError
from tapvote.storage.credentials import ServiceAccountCredentials
from tapvote.storage.local import InMemoryDocumentStore
from tapvote.storage.realtime import RealtimeDatabaseStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> DocumentStore:
    """Build the store for the configured environment."""
    if settings.use_realtime_database:
        credentials = None
        if settings.google_application_credentials and not settings.database_auth:
            credentials = ServiceAccountCredentials.from_file(settings.google_application_credentials)
        return RealtimeDatabaseStore(
            settings.database_url,
            auth=settings.database_auth,
            credentials=credentials,
        )
    
    if settings.is_production:
        raise ValueError("DATABASE_URL must be set in production")
    logger.warning("DATABASE_URL not set - using in-memory document store")
    return InMemoryDocumentStore()


__all__ = [
    "DocumentStore",
    "Paths",
    "StoreError",
    "InMemoryDocumentStore",
    "RealtimeDatabaseStore",
    "ServiceAccountCredentials",
    "create_store",
]
