"""Content store implementations."""

from .content_store import (
    ContentStore,
    InMemoryContentStore,
    JsonContentStore,
    record_from_payload,
    record_to_payload,
)

__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "JsonContentStore",
    "record_from_payload",
    "record_to_payload",
]
