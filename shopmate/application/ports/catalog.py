from __future__ import annotations

from abc import ABC, abstractmethod

from shopmate.domain.entities.product import Product


class CatalogPort(ABC):
    @abstractmethod
    def find_by_tags(self, keywords: list[str]) -> list[Product]:
        """Products whose tag set intersects `keywords`, in stable catalog order."""
        raise NotImplementedError

    @abstractmethod
    def find_by_category(self, category: str) -> list[Product]:
        """Products whose category equals `category` (case-insensitive)."""
        raise NotImplementedError

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        raise NotImplementedError

    @abstractmethod
    def list_products(self) -> list[Product]:
        """All products, newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_missing_embeddings(self) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    def save_embedding(self, product_id: str, embedding: list[float]) -> None:
        raise NotImplementedError

    @abstractmethod
    def match_by_embedding(self, embedding: list[float], threshold: float, count: int) -> list[Product]:
        """
        Nearest products by image embedding.

        Returns at most `count` products whose cosine similarity to `embedding`
        is at least `threshold`, most similar first. Products without an
        embedding never match.
        """
        raise NotImplementedError
