from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    code: str
    price: float
    stock: int
    image_url: str | None = None
    category: str | None = None
    tags: tuple[str, ...] = ()

    @staticmethod
    def from_row(row: dict[str, Any]) -> "Product":
        """Build a Product from a catalog row (snake_case columns) or a camelCase client payload."""
        raw_tags = row.get("tags") or ()
        if isinstance(raw_tags, str):
            raw_tags = raw_tags.split(",")
        tags = tuple(t.strip().lower() for t in raw_tags if t and str(t).strip())

        return Product(
            id=str(row.get("id") or ""),
            name=str(row.get("product_name") or row.get("name") or "").strip(),
            code=str(row.get("product_code") or row.get("code") or "").strip(),
            price=float(row.get("price") or 0),
            stock=int(row.get("stock_quantity") if row.get("stock_quantity") is not None else row.get("stock") or 0),
            image_url=row.get("image_url") or row.get("imageUrl"),
            category=(row.get("category") or None),
            tags=tags,
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_name": self.name,
            "product_code": self.code,
            "price": self.price,
            "stock_quantity": self.stock,
            "image_url": self.image_url,
            "category": self.category,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class MatchResult:
    product: Product | None
    reason: str | None = None
