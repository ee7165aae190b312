"""
Tests for campfire/src/core/indexer.py
Full catalog → embedding → batch upsert.
"""

import pytest

from conftest import FakeCatalog, FakeEmbedder, FakeVectorStore

from campfire.src.core.exceptions import IndexBuildError
from campfire.src.core.indexer import ProductIndexer, product_info
from campfire.src.core.models import Product


class TestProductInfo:
    """Canonical text fed to the embedding model."""

    def test_combines_name_price_and_description(self, tent):
        assert product_info(tent) == "[Tent] is a product that costs [99.00] and is described as [2-person tent]"

    def test_is_deterministic_across_whitespace_noise(self):
        a = Product(id=5, name="Camping  Lantern", price=19.99, description="Bright\nLED lantern ")
        b = Product(id=5, name="Camping Lantern", price=19.99, description="Bright LED lantern")
        assert product_info(a) == product_info(b)


class TestBuild:
    """Index build behaviour."""

    async def test_embeds_each_product_once_and_upserts_one_batch(self, catalog, embedder, vector_store, products):
        indexer = ProductIndexer(catalog, vector_store, embedder)

        count = await indexer.build()

        assert count == len(products)
        assert len(embedder.document_calls) == len(products)
        assert vector_store.upsert_calls == 1
        assert set(vector_store.records) == {"1", "2", "3"}

    async def test_metadata_carries_readable_fields(self, catalog, embedder, vector_store):
        await ProductIndexer(catalog, vector_store, embedder).build()

        _, meta = vector_store.records["1"]
        assert meta["name"] == "Tent"
        assert meta["description"] == "2-person tent"
        assert meta["price"] == 99

    async def test_failed_item_is_skipped_and_build_continues(self, catalog, vector_store):
        embedder = FakeEmbedder(fail_on=("Camping Stove",))

        count = await ProductIndexer(catalog, vector_store, embedder).build()

        assert count == 2
        assert set(vector_store.records) == {"1", "3"}

    async def test_upsert_failure_fails_the_build(self, catalog, embedder):
        store = FakeVectorStore(upsert_error=RuntimeError("lancedb unavailable"))

        with pytest.raises(IndexBuildError):
            await ProductIndexer(catalog, store, embedder).build()

    async def test_catalog_failure_fails_the_build(self, embedder, vector_store):
        class BrokenCatalog:
            async def list_all(self):
                raise ConnectionError("mongo down")

        with pytest.raises(IndexBuildError):
            await ProductIndexer(BrokenCatalog(), vector_store, embedder).build()

    async def test_empty_catalog_skips_upsert(self, embedder, vector_store):
        count = await ProductIndexer(FakeCatalog([]), vector_store, embedder).build()

        assert count == 0
        assert vector_store.upsert_calls == 0

    async def test_all_items_failing_fails_the_build(self, catalog, vector_store):
        embedder = FakeEmbedder(fail_on=("product",))

        with pytest.raises(IndexBuildError):
            await ProductIndexer(catalog, vector_store, embedder).build()
        assert vector_store.upsert_calls == 0

    async def test_embedding_timeouts_on_every_item_fail_the_build(self, catalog, vector_store):
        embedder = FakeEmbedder(delay=0.5)

        with pytest.raises(IndexBuildError):
            await ProductIndexer(catalog, vector_store, embedder, timeout=0.05).build()
        assert vector_store.records == {}

    async def test_rebuild_replaces_records_instead_of_appending(self, catalog, embedder, vector_store):
        indexer = ProductIndexer(catalog, vector_store, embedder)

        await indexer.build()
        await indexer.build()

        assert len(vector_store.records) == 3
