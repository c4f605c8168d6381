"""
Persistence adapters

Every adapter is a synchronous key-value store: ``read(key)`` returns the
stored bytes or ``None``; ``write(key, data)`` either stores the bytes or
raises ``PersistenceError``. There are no transactions and no versioning; the
store above keeps one record per collection.
"""

import logging
import os
import tempfile
from typing import Dict, Optional

from errors import PersistenceError

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "app_products"
CATEGORIES_KEY = "app_categories"
ORDERS_KEY = "app_orders"
CONFIG_KEY = "app_config"
CART_KEY = "customer_cart"


class Storage:
    """Interface shared by all adapters."""

    def read(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    """Process-local storage. ``quota_bytes`` caps the total size of all records."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._records: Dict[str, bytes] = {}
        self.quota_bytes = quota_bytes

    def read(self, key):
        return self._records.get(key)

    def write(self, key, data):
        if self.quota_bytes is not None:
            used = sum(len(v) for k, v in self._records.items() if k != key)
            if used + len(data) > self.quota_bytes:
                raise PersistenceError(key, "storage quota exceeded")
        self._records[key] = bytes(data)


class JsonFileStorage(Storage):
    """One JSON file per key inside an origin directory."""

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def read(self, key):
        try:
            with open(self._path(key), "rb") as fh:
                return fh.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(key, str(e)) from e

    def write(self, key, data):
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, self._path(key))
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(key, str(e)) from e


class MongoStorage(Storage):
    """Records kept as ``{_id: key, value: <json text>}`` documents."""

    collection_name = "kv_store"

    def __init__(self, database):
        self.collection = database[self.collection_name]

    def read(self, key):
        from pymongo.errors import PyMongoError

        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise PersistenceError(key, str(e)) from e
        if not doc:
            return None
        return doc["value"].encode("utf-8")

    def write(self, key, data):
        from pymongo.errors import PyMongoError

        try:
            self.collection.replace_one({"_id": key}, {"_id": key, "value": data.decode("utf-8")}, upsert=True)
        except PyMongoError as e:
            raise PersistenceError(key, str(e)) from e


def connect_mongo():
    """Database handle from DATABASE_URL / DATABASE_NAME, or None when unset."""
    database_url = os.getenv("DATABASE_URL")
    database_name = os.getenv("DATABASE_NAME")
    if not database_url or not database_name:
        return None
    from pymongo import MongoClient

    client = MongoClient(database_url)
    return client[database_name]


def get_storage() -> Storage:
    backend = os.getenv("STORAGE_BACKEND", "file").lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "mongo":
        db = connect_mongo()
        if db is None:
            raise RuntimeError("STORAGE_BACKEND=mongo needs DATABASE_URL and DATABASE_NAME")
        logger.info("using MongoDB storage (%s)", os.getenv("DATABASE_NAME"))
        return MongoStorage(db)
    if backend != "file":
        raise RuntimeError(f"unknown STORAGE_BACKEND {backend!r}")
    directory = os.getenv("STORAGE_DIR", ".store")
    logger.info("using file storage in %s", directory)
    return JsonFileStorage(directory)
