"""
Campfire - Product Index Build Script
======================================
CLI entry point that orchestrates:
    1. Validate settings (``GOOGLE_API_KEY``, ``MONGO_URI``): fail-fast.
    2. Initialise the embedder and ``ProductVectorStore`` (optionally drop
       the existing table).
    3. Run ``ProductIndexer.build()`` against the Mongo catalog.
    4. Print an execution summary with a timing breakdown.

Flags:
    --drop       Drop the LanceDB table before building (purges stale products).
    --drop-only  Drop the table and exit immediately.

Usage:
    python -m campfire.scripts.build_index
    python -m campfire.scripts.build_index --drop
    python -m campfire.scripts.build_index --drop-only
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

# ── Ensure project root is importable when run directly ────────────────
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="build_index", description="Campfire: Build the product vector index from the catalog.")
    parser.add_argument("--drop", action="store_true", default=False, help="Drop the LanceDB table before building (removes products deleted from the catalog).")
    parser.add_argument("--drop-only", action="store_true", default=False, help="Drop the LanceDB table and exit (no build).")
    return parser.parse_args(argv)


# ── Main Orchestration ─────────────────────────────────────────────────

async def _run(args: argparse.Namespace) -> int:
    t_start = time.perf_counter()

    # ── 0. Load settings + .env (timed) ────────────────────────────────
    t_settings = time.perf_counter()
    try:
        from campfire.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error: check your .env file:\n")
        print(f"  {exc}")
        print()
        return 1
    settings_ms = (time.perf_counter() - t_settings) * 1000

    from campfire.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Settings loaded in %.1fms", settings_ms)

    _print_header(settings)

    # ── 1. Vector store (timed) ────────────────────────────────────────
    from campfire.src.database.vector_store import ProductVectorStore

    t_lancedb = time.perf_counter()
    store = ProductVectorStore()
    lancedb_ms = (time.perf_counter() - t_lancedb) * 1000
    logger.info("LanceDB connection established in %.1fms", lancedb_ms)

    if args.drop or args.drop_only:
        logger.warning("Dropping table '%s' as requested.", store.table_name)
        await store.drop()
        if args.drop_only:
            _print_footer(0, 0, time.perf_counter() - t_start)
            return 0

    # ── 2. Embedder ────────────────────────────────────────────────────
    try:
        from campfire.src.core.clients import create_embedder

        embedder = create_embedder()
    except ImportError:
        logger.error("langchain-google-genai is not installed.")
        return 1

    # ── 3. Build ───────────────────────────────────────────────────────
    from campfire.src.core.exceptions import IndexBuildError
    from campfire.src.core.indexer import ProductIndexer
    from campfire.src.database.catalog import MongoCatalogStore

    indexer = ProductIndexer(MongoCatalogStore(), store, embedder)
    try:
        written = await indexer.build()
    except IndexBuildError as exc:
        logger.error("Index build failed: %s", exc)
        return 1

    # ── 4. Summary ─────────────────────────────────────────────────────
    _print_footer(written, await store.count(), time.perf_counter() - t_start)
    return 0


def main(argv: list[str] | None = None) -> None:
    sys.exit(asyncio.run(_run(_parse_args(argv))))


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object) -> None:
    mongo_uri_val = settings.MONGO_URI.get_secret_value()  # type: ignore[attr-defined]
    mongo_masked = mongo_uri_val.split("@")[-1] if "@" in mongo_uri_val else mongo_uri_val

    print()
    print("=" * 60)
    print("  CAMPFIRE: Product Index Build")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                   # type: ignore[attr-defined]
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")       # type: ignore[attr-defined]
    print(f"  LanceDB      : {settings.LANCEDB_URI} (table: {settings.LANCEDB_TABLE_NAME})")  # type: ignore[attr-defined]
    print(f"  MongoDB      : {mongo_masked} (db: {settings.MONGO_DB_NAME})")  # type: ignore[attr-defined]
    print(f"  Workers      : {settings.MAX_WORKERS}")           # type: ignore[attr-defined]
    print("=" * 60)
    print()


def _print_footer(written: int, total_rows: int, elapsed: float) -> None:
    print()
    print("=" * 60)
    print("  EXECUTION SUMMARY")
    print("-" * 60)
    print(f"  Records upserted     : {written}")
    print(f"  Rows in table        : {total_rows}")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
