from __future__ import annotations

import json
import logging
import math
from pathlib import Path

from shopmate.application.ports.catalog import CatalogPort
from shopmate.domain.entities.product import Product


class MemoryCatalog(CatalogPort):
    """In-process catalog, optionally seeded from a JSON file of product rows."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._products: list[Product] = list(products or [])
        self._embeddings: dict[str, list[float]] = {}

    @staticmethod
    def from_json(path: str | Path) -> "MemoryCatalog":
        file_path = Path(path)
        if not file_path.exists():
            logging.getLogger(__name__).warning("Catalog seed file missing", extra={"path": str(file_path)})
            return MemoryCatalog()
        with open(file_path, "r", encoding="utf-8") as f:
            rows = json.load(f)
        return MemoryCatalog([Product.from_row(row) for row in rows])

    def find_by_tags(self, keywords: list[str]) -> list[Product]:
        wanted = {k.strip().lower() for k in keywords if k and k.strip()}
        return [p for p in self._products if wanted.intersection(p.tags)]

    def find_by_category(self, category: str) -> list[Product]:
        label = (category or "").strip().lower()
        return [p for p in self._products if label and (p.category or "").lower() == label]

    def get_product(self, product_id: str) -> Product | None:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def list_products(self) -> list[Product]:
        # Seed order is oldest first.
        return list(reversed(self._products))

    def list_missing_embeddings(self) -> list[Product]:
        return [p for p in self._products if p.id not in self._embeddings]

    def save_embedding(self, product_id: str, embedding: list[float]) -> None:
        self._embeddings[product_id] = list(embedding)

    def match_by_embedding(self, embedding: list[float], threshold: float, count: int) -> list[Product]:
        scored = []
        for product in self._products:
            stored = self._embeddings.get(product.id)
            if stored is None:
                continue
            similarity = cosine_similarity(embedding, stored)
            if similarity >= threshold:
                scored.append((similarity, product))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [product for _, product in scored[: max(count, 0)]]

    def put(self, product: Product) -> None:
        for i, existing in enumerate(self._products):
            if existing.id == product.id:
                self._products[i] = product
                return
        self._products.append(product)

    def remove(self, product_id: str) -> None:
        self._products = [p for p in self._products if p.id != product_id]


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if len(a) != len(b):
        return 0.0
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if not norm:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / norm
