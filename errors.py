"""
Error kinds shared by the storage layer, the record service and the HTTP surfaces.
"""

from __future__ import annotations


class AlumniRecordsError(Exception):
    """Base class for every error raised by this application."""


class CacheParseError(AlumniRecordsError):
    """The local cache slot holds something that is not a JSON array of objects."""


class CacheWriteError(AlumniRecordsError):
    """The local cache slot could not be written."""


class StoreError(AlumniRecordsError):
    """Base class for document store failures."""


class StoreWriteError(StoreError):
    pass


class StoreReadError(StoreError):
    pass


class StoreDeleteError(StoreError):
    pass


class DocumentNotFoundError(StoreDeleteError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document {doc_id!r} in collection {collection!r}")
        self.collection = collection
        self.doc_id = doc_id


class MigrationError(StoreWriteError):
    """
    A store write failed partway through a migration.

    Records written before the failure stay committed; the counts say how far it got.
    """

    def __init__(self, message: str, *, migrated_count: int, total_count: int):
        super().__init__(message)
        self.migrated_count = migrated_count
        self.total_count = total_count


class InvalidArgument(AlumniRecordsError, ValueError):
    pass
