"""
JSON-LD — Извлечение schema.org Product из HTML страницы продукта

Некорректные блоки (битый JSON, чужой @context/@type) логируются
и пропускаются — это recoverable путь, а не ошибка корзины.
"""

import json
import logging
from typing import Any, Mapping, Optional

import pydantic
from bs4 import BeautifulSoup

from shopless.core.domain.product import ProductDescriptor
from shopless.core.errors import TransportError


logger = logging.getLogger(__name__)

SCHEMA_ORG_CONTEXTS = frozenset({"http://schema.org", "https://schema.org"})


def is_product(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    context = str(data.get("@context", "")).rstrip("/")
    return context in SCHEMA_ORG_CONTEXTS and data.get("@type") == "Product"


def extract_product_jsonld(html: str) -> Optional[dict[str, Any]]:
    """
    Первый JSON-LD блок с типом schema.org Product.

    Args:
        html: HTML страницы

    Returns:
        dict JSON-LD или None, если подходящего блока нет
    """
    soup = BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script", type="application/ld+json"):
        text = script.string or script.get_text()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON-LD has been ignored, error was: %s", e)
            continue

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if is_product(candidate):
                return candidate

        for candidate in candidates:
            context = candidate.get("@context") if isinstance(candidate, dict) else None
            kind = candidate.get("@type") if isinstance(candidate, dict) else None
            logger.warning("JSON-LD with invalid @context/@type has been ignored: %s/%s", context, kind)

    return None


def parse_product_descriptor(data: Mapping[str, Any]) -> ProductDescriptor:
    """
    Raises:
        TransportError: Если данные продукта не соответствуют модели
    """
    try:
        return ProductDescriptor.model_validate(dict(data))
    except pydantic.ValidationError as e:
        raise TransportError(f"Malformed product data: {e}") from e
