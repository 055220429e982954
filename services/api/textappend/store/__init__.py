"""Shared resource store backends."""

from .objects import (
    InMemoryObjectStore,
    LocalFileObjectStore,
    ObjectMetadata,
    ObjectStore,
    S3ObjectStore,
    utc_now,
)

__all__ = [
    "InMemoryObjectStore",
    "LocalFileObjectStore",
    "ObjectMetadata",
    "ObjectStore",
    "S3ObjectStore",
    "utc_now",
]
