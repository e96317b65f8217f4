"""
Address — Адрес доставки или выставления счёта

Immutable: корзина заменяет адрес целиком, никогда не мутирует частично.
country_name — производное поле (локализованное имя страны из settings).
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class Address(BaseModel):
    recipient: str = Field(..., min_length=1)
    line1: str = Field(..., min_length=1)
    line2: str = ""
    postal_code: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    province: Optional[str] = None
    country: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    country_name: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        return v.upper()

    @field_validator("line2", mode="before")
    @classmethod
    def default_line2(cls, v: Optional[str]) -> str:
        return v or ""

    def with_country_name(self, name: Optional[str]) -> "Address":
        return self.model_copy(update={"country_name": name})
