"""Конфигурация корзины."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from shopless.core.domain.settings import DEFAULT_LANGUAGE
from shopless.core.domain.tax_policy import TaxPolicy
from shopless.core.errors import ValidationError


# Ключ snapshot в хранилище
STORAGE_KEY = "shoplessCart"

SETTINGS_PATH = "/.well-known/shopless/settings.json"


@dataclass(frozen=True)
class CartConfig:
    """
    Конфигурация корзины.

    endpoint нормализуется до завершающего '/'.
    origin используется для абсолютных URL позиций в заказе; по умолчанию
    берётся scheme://host из endpoint.
    tax_policy переопределяет политику, выводимую из settings.
    """

    endpoint: str
    currency: str = "EUR"
    stack_line_items: bool = True
    origin: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    tax_policy: Optional[TaxPolicy] = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ValidationError("Endpoint must be defined")
        if not self.currency:
            raise ValidationError("Currency must be defined")

        if not self.endpoint.endswith("/"):
            object.__setattr__(self, "endpoint", self.endpoint + "/")

        if self.origin is None:
            parts = urlsplit(self.endpoint)
            if parts.scheme and parts.netloc:
                object.__setattr__(self, "origin", f"{parts.scheme}://{parts.netloc}")
        elif self.origin.endswith("/"):
            object.__setattr__(self, "origin", self.origin.rstrip("/"))
