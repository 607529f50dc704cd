"""商品レコードの保存先"""

from .base import LegacySource, ProductStore
from .firestore import FirestoreProductStore
from .legacy import LegacyDatabaseSource, LocalStorageSource
from .memory import MemoryProductStore
from .sqlite_store import SqliteProductStore

__all__ = [
    "ProductStore",
    "LegacySource",
    "SqliteProductStore",
    "FirestoreProductStore",
    "MemoryProductStore",
    "LocalStorageSource",
    "LegacyDatabaseSource",
]
