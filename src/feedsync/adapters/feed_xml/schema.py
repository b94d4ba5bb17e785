"""Pydantic models describing one ``<izdelek>`` element of the product feed."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

ITEM_CONTAINER: Final[str] = "izdelki"
ITEM_ELEMENT: Final[str] = "izdelek"
STOCK_FIELD: Final[str] = "dobava"


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _strip_or_empty(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StockMarkerPayload(FeedBaseModel):
    presence_id: str | None = Field(default=None, alias="id")
    text: str = ""

    _normalize_presence_id = field_validator("presence_id", mode="before")(_blank_to_none)
    _normalize_text = field_validator("text", mode="before")(_strip_or_empty)


class FeedItemPayload(FeedBaseModel):
    """Known fields are aliased; everything else (additional images) stays in extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    external_id: str = Field(default="", alias="izdelekID")
    name: str = Field(default="", alias="izdelekIme")
    description: str = Field(default="", alias="opis")
    price: str = Field(default="", alias="PPC")
    stock: StockMarkerPayload | None = Field(default=None, alias=STOCK_FIELD)
    brand: str | None = Field(default=None, alias="blagovnaZnamka")
    primary_image: str | None = Field(default=None, alias="slikaVelika")

    _normalize_strings = field_validator(
        "external_id", "name", "description", "price", mode="before"
    )(_strip_or_empty)
    _normalize_optional = field_validator("brand", "primary_image", mode="before")(
        _blank_to_none
    )

    def extra_fields(self) -> dict[str, str]:
        extras = self.model_extra or {}
        return {name: value for name, value in extras.items() if isinstance(value, str)}


KNOWN_FIELDS: Final[frozenset[str]] = frozenset(
    field.alias for field in FeedItemPayload.model_fields.values() if field.alias
)
