from __future__ import annotations

from shopmate.application.exceptions import CatalogError
from shopmate.application.ports.catalog import CatalogPort
from shopmate.domain.entities.product import Product
from shopmate.infrastructure.supabase.rest_client import SupabaseRestClient, SupabaseRestError, in_list

PRODUCTS_TABLE = "products"
MATCH_FUNCTION = "match_products"
PRODUCT_COLUMNS = "id,product_name,product_code,price,stock_quantity,image_url,category,tags,created_at"


class SupabaseCatalog(CatalogPort):
    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    def find_by_tags(self, keywords: list[str]) -> list[Product]:
        if not keywords:
            return []
        return self._select({"select": PRODUCT_COLUMNS, "tags": f"ov.{in_list(keywords)}", "order": "id.asc"})

    def find_by_category(self, category: str) -> list[Product]:
        if not category:
            return []
        return self._select({"select": PRODUCT_COLUMNS, "category": f"ilike.{category}", "order": "id.asc"})

    def get_product(self, product_id: str) -> Product | None:
        rows = self._select({"select": PRODUCT_COLUMNS, "id": f"eq.{product_id}", "limit": "1"})
        return rows[0] if rows else None

    def list_products(self) -> list[Product]:
        return self._select({"select": PRODUCT_COLUMNS, "order": "created_at.desc"})

    def list_missing_embeddings(self) -> list[Product]:
        return self._select({"select": PRODUCT_COLUMNS, "image_embedding": "is.null", "order": "id.asc"})

    def save_embedding(self, product_id: str, embedding: list[float]) -> None:
        try:
            self._client.update(PRODUCTS_TABLE, {"id": f"eq.{product_id}"}, {"image_embedding": embedding})
        except SupabaseRestError as e:
            raise CatalogError(str(e)) from e

    def match_by_embedding(self, embedding: list[float], threshold: float, count: int) -> list[Product]:
        try:
            rows = self._client.rpc(
                MATCH_FUNCTION,
                {"query_embedding": embedding, "match_threshold": threshold, "match_count": count},
            )
        except SupabaseRestError as e:
            raise CatalogError(str(e)) from e
        return [Product.from_row(row) for row in rows]

    def _select(self, params: dict[str, str]) -> list[Product]:
        try:
            rows = self._client.select(PRODUCTS_TABLE, params)
        except SupabaseRestError as e:
            raise CatalogError(str(e)) from e
        return [Product.from_row(row) for row in rows]
