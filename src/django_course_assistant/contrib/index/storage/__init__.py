from .base import (
    DEFAULT_TOP_K,
    BaseStorageQuerySet,
    StorageProvider,
)
from .inmemory import InMemoryProvider

__all__ = [
    "DEFAULT_TOP_K",
    "BaseStorageQuerySet",
    "InMemoryProvider",
    "StorageProvider",
]
