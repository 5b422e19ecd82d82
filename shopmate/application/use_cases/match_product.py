from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from shopmate.application.exceptions import LLMContractError
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.llm import LLMPort
from shopmate.domain.entities.product import MatchResult, Product

MATCH_MODES = {"keywords", "category", "embedding"}

REASON_NOT_IDENTIFIED = "Sorry, I could not identify a product in this image."
REASON_NO_MATCH = "Sorry, I could not find a matching product in our catalog."


@dataclass
class MatchProductUseCase:
    llm: LLMPort
    catalog: CatalogPort
    mode: str = "keywords"
    match_threshold: float = 0.8
    match_count: int = 1

    def __post_init__(self) -> None:
        if self.mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode: {self.mode!r}")
        self._logger = logging.getLogger(__name__)

    def execute(self, image: bytes, mime_type: str) -> MatchResult:
        if not image:
            raise ValueError("Image data is empty.")

        if self.mode == "category":
            category = parse_category(self.llm.classify_category(image, mime_type))
            if not category:
                return MatchResult(product=None, reason=REASON_NOT_IDENTIFIED)
            candidates = self.catalog.find_by_category(category)
            self._logger.info("Category lookup", extra={"category": category, "candidates": len(candidates)})
        elif self.mode == "embedding":
            description = self.llm.describe_upload(image, mime_type).strip()
            if not description:
                return MatchResult(product=None, reason=REASON_NOT_IDENTIFIED)
            candidates = self.catalog.match_by_embedding(
                self.llm.embed(description), self.match_threshold, self.match_count
            )
            self._logger.info("Embedding lookup", extra={"candidates": len(candidates)})
        else:
            keywords = parse_keywords(self.llm.extract_keywords(image, mime_type))
            if not keywords:
                return MatchResult(product=None, reason=REASON_NOT_IDENTIFIED)
            candidates = self.catalog.find_by_tags(keywords)
            self._logger.info("Keyword lookup", extra={"keywords": ",".join(keywords), "candidates": len(candidates)})

        if not candidates:
            return MatchResult(product=None, reason=REASON_NO_MATCH)
        if len(candidates) == 1:
            return MatchResult(product=candidates[0])

        return MatchResult(product=self._disambiguate(image, mime_type, candidates))

    def _disambiguate(self, image: bytes, mime_type: str, candidates: list[Product]) -> Product:
        code = normalize_code(self.llm.pick_best_match(image, mime_type, candidates))
        for product in candidates:
            if normalize_code(product.code) == code:
                return product
        self._logger.info("Disambiguation returned unknown code; using first candidate", extra={"reason": code})
        return candidates[0]


def parse_keywords(text: str) -> list[str]:
    """Split comma/newline separated model output into unique lowercase keywords, keeping order."""
    seen: set[str] = set()
    out: list[str] = []
    for raw in re.split(r"[,\n]", text or ""):
        keyword = raw.strip().strip(".\"'`*-").strip().lower()
        if keyword and keyword not in seen:
            seen.add(keyword)
            out.append(keyword)
    return out


def parse_category(text: str) -> str | None:
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None
    try:
        data = json.loads(cleaned)
    except Exception:
        snippet = cleaned[:200].replace("\n", " ")
        raise LLMContractError(f"Category: invalid JSON. Snippet: {snippet!r}")
    if not isinstance(data, dict):
        raise LLMContractError("Category: expected a JSON object with 'category' key.")
    category = data.get("category")
    if category is None:
        return None
    category = str(category).strip().lower()
    return category or None


def normalize_code(text: str | None) -> str:
    return (text or "").strip().strip("\"'`.").strip().lower()


def strip_code_fences(text: str | None) -> str:
    return re.sub(r"```(?:json)?\s*|\s*```", "", text or "").strip()
