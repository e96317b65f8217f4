"""Adapters — реализации внешних коллабораторов (HTTP, JSON-LD, хранилища)."""

from .http import HttpCatalogResolver, HttpOrderTransport, HttpSettingsProvider
from .jsonld import extract_product_jsonld, is_product, parse_product_descriptor
from .storage import InMemoryStorage, JsonFileStorage

__all__ = [
    "HttpCatalogResolver",
    "HttpOrderTransport",
    "HttpSettingsProvider",
    "extract_product_jsonld",
    "is_product",
    "parse_product_descriptor",
    "InMemoryStorage",
    "JsonFileStorage",
]
