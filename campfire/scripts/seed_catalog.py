"""
Campfire - Catalog Seed Script
===============================
Loads sample products from a JSON file into the MongoDB catalog
(insert-or-replace by ``id``).

Usage:
    python -m campfire.scripts.seed_catalog
    python -m campfire.scripts.seed_catalog --file path/to/products.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="seed_catalog", description="Campfire: Load sample products into the MongoDB catalog.")
    parser.add_argument("--file", type=Path, default=None, help="JSON array of products (defaults to SEED_DATA_PATH).")
    return parser.parse_args(argv)


def load_products(path: Path) -> list:
    """Parse and validate the product list in *path*."""
    from campfire.src.core.models import Product

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON array of products.")
    return [Product.model_validate(item) for item in raw]


async def _run(args: argparse.Namespace) -> int:
    try:
        from campfire.config.settings import settings
    except Exception as exc:
        print(f"\n[FATAL] Configuration error: check your .env file:\n\n  {exc}\n")
        return 1

    from campfire.src.database.catalog import MongoCatalogStore
    from campfire.src.utils.logger import get_logger

    logger = get_logger(__name__)
    path = args.file or settings.SEED_DATA_PATH

    try:
        products = load_products(path)
    except (OSError, ValueError) as exc:
        logger.error("Cannot load seed data from %s: %s", path, exc)
        return 1

    written = await MongoCatalogStore().seed(products)
    logger.info("Catalog seeded from %s: %d product(s).", path, written)
    return 0


def main(argv: list[str] | None = None) -> None:
    sys.exit(asyncio.run(_run(_parse_args(argv))))


if __name__ == "__main__":
    main()
