"""
Campfire - Centralized Configuration
=====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr`` and has **no default value**.
  If the key is missing at startup, Pydantic raises a ``ValidationError``.
  The raw value is never exposed in repr, logs, or tracebacks.
- ``MONGO_URI`` is also ``SecretStr`` because connection strings carry
  credentials.
- ``LANCEDB_API_KEY`` is only needed for a remote (``db://``) LanceDB.

Retrieval tuning
----------------
``SEARCH_RESULTS_LIMIT`` is the number of products surfaced per answer.
The vector store is asked for ``SEARCH_RESULTS_LIMIT * SEARCH_OVERFETCH_FACTOR``
candidates so that ``RELEVANCE_THRESHOLD`` can discard weak ones and still
leave something to show.  Scores are cosine similarities (higher is closer).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required**.

    Attributes
    ----------
    GOOGLE_API_KEY : SecretStr
        API key for Google AI Studio (Gemini embeddings + chat).  **Required.**
    MONGO_URI : SecretStr
        MongoDB connection string for the product catalog.  **Required.**
    MONGO_DB_NAME : str
        Database holding the catalog.
    MONGO_PRODUCTS_COLLECTION : str
        Collection holding one document per product.
    LANCEDB_URI : str
        Local directory or ``db://`` URI of the vector store.
    LANCEDB_TABLE_NAME : str
        Name of the product vector table.
    RELEVANCE_THRESHOLD : float
        Minimum cosine similarity for a candidate to be surfaced.
    REMOTE_CALL_TIMEOUT_SECONDS : float
        Upper bound for every embedding / chat / catalog / vector call.
    MAX_WORKERS : int
        Concurrent embedding calls during an index build.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    SEED_DATA_PATH: Path = BASE_DIR / "data" / "products.json"

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"

    # ── API Keys (REQUIRED: no default) ───────────────────────────────
    GOOGLE_API_KEY: SecretStr

    # ── MongoDB catalog (REQUIRED: no default) ────────────────────────
    MONGO_URI: SecretStr
    MONGO_DB_NAME: str = "campfire"
    MONGO_PRODUCTS_COLLECTION: str = "products"

    # ── Model Configuration ────────────────────────────────────────────
    EMBEDDING_MODEL: str = "models/gemini-embedding-001"
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_TEMPERATURE: float = 0.7

    # ── LanceDB ────────────────────────────────────────────────────────
    LANCEDB_URI: str = str(BASE_DIR / "data" / "lancedb")
    LANCEDB_API_KEY: SecretStr | None = None
    LANCEDB_TABLE_NAME: str = "products"

    # ── Retrieval ──────────────────────────────────────────────────────
    SEARCH_RESULTS_LIMIT: int = 1
    SEARCH_OVERFETCH_FACTOR: int = 2
    RELEVANCE_THRESHOLD: float = 0.3

    # ── Remote calls / concurrency ─────────────────────────────────────
    REMOTE_CALL_TIMEOUT_SECONDS: float = 30.0
    MAX_WORKERS: int = 4

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("RELEVANCE_THRESHOLD")
    @classmethod
    def _threshold_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"RELEVANCE_THRESHOLD must be within 0–1, got {v}")
        return v


    @field_validator("SEARCH_RESULTS_LIMIT", "SEARCH_OVERFETCH_FACTOR")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"value must be ≥ 1, got {v}")
        return v


    @field_validator("REMOTE_CALL_TIMEOUT_SECONDS")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"REMOTE_CALL_TIMEOUT_SECONDS must be > 0, got {v}")
        return v


    @field_validator("MAX_WORKERS")
    @classmethod
    def _workers_range(cls, v: int) -> int:
        if not 1 <= v <= 16:
            raise ValueError(f"MAX_WORKERS must be 1–16, got {v}")
        return v

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def candidate_count(self) -> int:
        """Number of nearest neighbours requested from the vector store."""
        return self.SEARCH_RESULTS_LIMIT * self.SEARCH_OVERFETCH_FACTOR


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from campfire.config.settings import settings
settings = Settings()
