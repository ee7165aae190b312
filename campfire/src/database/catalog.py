"""
Campfire - MongoCatalogStore
=============================
Async product catalog backed by MongoDB via ``motor``.

Collection schema (``products``)::

    {
        "id": int,            # unique, indexed
        "name": str,
        "description": str,
        "price": float,
        "image_url": str | None
    }

The search pipeline only reads: ``list_all()`` once per index build and
``find_by_id()`` per matched candidate.  ``seed()`` is used by the
``seed_catalog`` script to load sample data.
"""

from __future__ import annotations

from collections.abc import Iterable

import motor.motor_asyncio
from pydantic import ValidationError
from pymongo import ASCENDING, ReplaceOne

from campfire.config.settings import settings
from campfire.src.core.models import Product
from campfire.src.utils.async_utils import run_with_timeout
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)

# Mongo's own ``_id`` never leaves this module
_PROJECTION = {"_id": 0}


# ══════════════════════════════════════════════════════════════════════
#  MONGODB SINGLETON CLIENT
# ══════════════════════════════════════════════════════════════════════

_mongo_client: motor.motor_asyncio.AsyncIOMotorClient | None = None


def _get_mongo_client() -> motor.motor_asyncio.AsyncIOMotorClient:
    """Return (or create) the module-level async MongoDB client."""
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = motor.motor_asyncio.AsyncIOMotorClient(settings.MONGO_URI.get_secret_value())
        logger.info("MongoDB async client created (singleton).")
    return _mongo_client


class MongoCatalogStore:
    """
    Read-mostly view of the product collection.

    Parameters
    ----------
    collection
        Optional pre-built motor collection (tests, alternative databases).
        Defaults to ``settings.MONGO_DB_NAME`` / ``settings.MONGO_PRODUCTS_COLLECTION``.
    timeout
        Per-call bound in seconds.
    """

    __slots__ = ("_collection", "_timeout")

    def __init__(self, collection: motor.motor_asyncio.AsyncIOMotorCollection | None = None, timeout: float | None = None) -> None:
        if collection is None:
            client = _get_mongo_client()
            collection = client[settings.MONGO_DB_NAME][settings.MONGO_PRODUCTS_COLLECTION]
        self._collection = collection
        self._timeout = timeout or settings.REMOTE_CALL_TIMEOUT_SECONDS


    async def list_all(self) -> list[Product]:
        """
        Return every valid product, ordered by id.

        Documents that do not validate as a ``Product`` are logged and skipped.
        """
        cursor = self._collection.find({}, _PROJECTION).sort("id", ASCENDING)
        docs = await run_with_timeout(cursor.to_list(length=None), self._timeout, "catalog list")

        products: list[Product] = []
        for doc in docs:
            try:
                products.append(Product.model_validate(doc))
            except ValidationError as exc:
                logger.warning("[CATALOG] Skipping invalid product document %s: %s", doc.get("id", "<no id>"), exc.errors()[0].get("msg"))
        return products


    async def find_by_id(self, product_id: int) -> Product | None:
        """Return the product with *product_id*, or ``None`` if it no longer exists."""
        doc = await run_with_timeout(self._collection.find_one({"id": product_id}, _PROJECTION), self._timeout, "catalog lookup")
        if doc is None:
            return None
        return Product.model_validate(doc)


    async def seed(self, products: Iterable[Product]) -> int:
        """
        Insert-or-replace *products* keyed by ``id`` and ensure the unique index.

        Returns the number of products written.
        """
        operations = [ReplaceOne({"id": p.id}, p.model_dump(), upsert=True) for p in products]
        await run_with_timeout(self._collection.create_index([("id", ASCENDING)], unique=True), self._timeout, "catalog index")
        if not operations:
            return 0
        result = await run_with_timeout(self._collection.bulk_write(operations, ordered=False), self._timeout, "catalog seed")
        written = result.upserted_count + result.matched_count
        logger.info("[CATALOG] Seeded %d product(s) (%d new).", written, result.upserted_count)
        return written
