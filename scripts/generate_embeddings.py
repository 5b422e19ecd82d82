#!/usr/bin/env python3
"""
Backfill image embeddings for catalog products.

Usage:
  python3 scripts/generate_embeddings.py [--limit N] [--dry-run]

For every product without an `image_embedding`, asks the vision model for a
factual description of its image, embeds the description and writes the
vector back. A failure on one product is logged and the batch continues.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shopmate.application.exceptions import CatalogError, LLMContractError, LLMUpstreamError
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.llm import LLMPort

logger = logging.getLogger("generate_embeddings")


def backfill(catalog: CatalogPort, llm: LLMPort, limit: int | None = None, dry_run: bool = False) -> tuple[int, int]:
    """Returns (succeeded, failed)."""
    products = catalog.list_missing_embeddings()
    if limit is not None:
        products = products[:limit]

    if not products:
        logger.info("All products already have embeddings. Nothing to do.")
        return 0, 0

    logger.info("Found %d products to process", len(products))
    succeeded = failed = 0
    for product in products:
        try:
            if not product.image_url:
                raise LLMContractError("product has no image_url")
            description = llm.describe_image(product.image_url, product.name)
            logger.info("Description for %s: %r", product.name, description[:100])
            embedding = llm.embed(description)
            if not dry_run:
                catalog.save_embedding(product.id, embedding)
            succeeded += 1
            logger.info("Saved embedding", extra={"product_id": product.id})
        except (LLMUpstreamError, LLMContractError, CatalogError) as e:
            failed += 1
            logger.error("Failed to generate embedding", extra={"product_id": product.id, "reason": str(e)})

    return succeeded, failed


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill product image embeddings")
    parser.add_argument("--limit", type=int, default=None, help="Process at most N products")
    parser.add_argument("--dry-run", action="store_true", help="Generate but do not save embeddings")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    from shopmate.core.config import settings
    from shopmate.wiring.dependencies import get_catalog, get_llm, shutdown

    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
        logger.warning("SUPABASE_URL/SUPABASE_SERVICE_KEY not set; running against the local seed catalog")

    try:
        succeeded, failed = backfill(get_catalog(), get_llm(), limit=args.limit, dry_run=args.dry_run)
    finally:
        shutdown()

    print(f"Embedding generation finished: {succeeded} saved, {failed} failed.")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
