from shopmate.domain.entities.product import Product


def build_keywords_prompt() -> str:
    return (
        "You are a product recognition assistant for an online store.\n"
        "Look at the product in the image and describe it as search keywords.\n"
        "Rules:\n"
        "  - Return 5 to 7 keywords.\n"
        "  - All keywords lowercase, separated by commas, nothing else.\n"
        "  - Cover product type, color, material, pattern and style.\n"
        "  - If there is no recognizable product, return an empty response.\n"
        "Example: polo shirt, navy, cotton, short sleeve, casual\n"
    )


def build_category_prompt() -> str:
    return (
        "You are a product recognition assistant for an online store.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"category\": \"<single lowercase category label>\"}\n"
        "Use null for category if there is no recognizable product.\n"
    )


def build_disambiguation_prompt(candidates: list[Product]) -> str:
    lines = [
        f"  - code: {p.code} | name: {p.name} | tags: {', '.join(p.tags)}"
        for p in candidates
    ]
    return (
        "The image shows one product. Several catalog products could match it:\n"
        + "\n".join(lines)
        + "\n\n"
        "Return ONLY the code of the single best matching product. No other text.\n"
    )


def build_customer_details_prompt(text: str) -> str:
    return (
        "You are a data extraction expert.\n"
        "Parse the text below and extract the customer's name, address and phone number.\n"
        "Return ONLY a valid JSON object with exactly the keys \"name\", \"address\" and \"phone\".\n"
        "If a field is missing, set its value to null.\n"
        "\n"
        f"Text to parse: {text!r}\n"
    )


def build_description_prompt(product_name: str | None = None) -> str:
    prompt = (
        "Generate a detailed, factual description of this product image suitable for creating a "
        "searchable vector embedding. Focus on objective attributes like the item's type, color, "
        "shape, material, texture, and any unique visual features."
    )
    if product_name:
        prompt += f"\nProduct Name: {product_name}"
    return prompt
