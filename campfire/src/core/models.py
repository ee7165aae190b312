"""
Campfire - Domain Models
=========================
Catalog entities and the transient values that flow through a search.

``Product`` and ``SearchResponse`` are pydantic models so they serialise
straight to JSON from the API layer.  ``VectorHit`` and ``QueryMatch``
never leave the process and are plain frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

# ── Type Aliases ──────────────────────────────────────────────────────
Vector = list[float]
RecordMetadata = dict[str, str | int | float | None]


class Product(BaseModel):
    """A catalog item.  Owned by the catalog store, never mutated here."""

    id: int
    name: str
    description: str = ""
    price: float = 0.0
    image_url: str | None = None

    @property
    def key(self) -> str:
        """Identifier as stored in the vector table."""
        return str(self.id)

    def metadata(self) -> RecordMetadata:
        """Human-readable fields stored next to the product vector."""
        return {"name": self.name, "description": self.description, "price": self.price, "image_url": self.image_url}


class SearchResponse(BaseModel):
    """Answer text plus the products it was grounded on."""

    response: str
    products: list[Product] = Field(default_factory=list)


@dataclass(frozen=True)
class VectorHit:
    """
    One nearest-neighbour candidate from the vector store.

    ``score`` is a similarity: higher means closer to the query.  It is
    ``None`` when the store was asked not to return distances.
    """

    id: str
    score: float | None
    metadata: RecordMetadata | None = None


@dataclass(frozen=True)
class QueryMatch:
    """A candidate that passed the relevance threshold and resolved to a product."""

    product_id: str
    score: float
    product: Product


class IndexState(str, Enum):
    """Lifecycle of the product index within one process."""

    UNINDEXED = "unindexed"
    BUILDING = "building"
    READY = "ready"
