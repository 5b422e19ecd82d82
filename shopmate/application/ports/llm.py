from abc import ABC, abstractmethod

from shopmate.domain.entities.conversation import ConversationTurn
from shopmate.domain.entities.product import Product


class LLMPort(ABC):
    @abstractmethod
    def extract_keywords(self, image: bytes, mime_type: str) -> str:
        """
        Describe a product photo as search keywords.

        Requirements:
        - Return 5-7 lowercase keywords separated by commas (e.g. "polo shirt, navy, cotton")
        - Return an empty string if nothing recognizable is in the image

        Returns:
            Raw model text; the caller splits and normalizes it
        """
        raise NotImplementedError

    @abstractmethod
    def classify_category(self, image: bytes, mime_type: str) -> str:
        """
        Classify a product photo into a single catalog category.

        Returns:
            Raw model text expected to be a JSON object {"category": "<label>"}
        """
        raise NotImplementedError

    @abstractmethod
    def pick_best_match(self, image: bytes, mime_type: str, candidates: list[Product]) -> str:
        """
        Pick the candidate that best matches the photo.

        Requirements:
        - Candidates are presented with their code, name and tags
        - Return only the merchant code of the chosen candidate

        Returns:
            Raw model text; the caller matches it against candidate codes
        """
        raise NotImplementedError

    @abstractmethod
    def chat(
        self,
        system_instruction: str,
        preamble: str,
        history: list[ConversationTurn],
        user_message: str,
    ) -> str:
        """
        Run one conversational exchange.

        Args:
            system_instruction: Persona, language, tone and product context
            preamble: Seeded assistant turn placed right after the instruction
            history: Prior user/assistant turns, oldest first
            user_message: The new user message

        Returns:
            Raw reply text, possibly carrying the collect-info marker
        """
        raise NotImplementedError

    @abstractmethod
    def extract_customer_details(self, text: str) -> str:
        """
        Extract name, address and phone from free text.

        Returns:
            Raw model text expected to be a JSON object with exactly the keys
            "name", "address", "phone" (null for anything not found)
        """
        raise NotImplementedError

    @abstractmethod
    def describe_image(self, image_url: str, product_name: str) -> str:
        """Factual description of a catalog image, used as embedding input."""
        raise NotImplementedError

    @abstractmethod
    def describe_upload(self, image: bytes, mime_type: str) -> str:
        """
        Factual description of an uploaded photo, in the same register as
        `describe_image`, so both embed into the same space.

        Returns:
            Raw model text; empty when nothing recognizable is in the image
        """
        raise NotImplementedError

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        raise NotImplementedError
