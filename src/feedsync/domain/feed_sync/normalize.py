"""Field normalisation for raw feed values."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

import nh3

if TYPE_CHECKING:
    from feedsync.domain.model import StockMarker

IN_STOCK_PHRASES: Final[tuple[str, ...]] = ("na zalogi", "zaloga", "na voljo")

ALLOWED_DESCRIPTION_TAGS: Final[frozenset[str]] = frozenset(
    {
        "a",
        "b",
        "blockquote",
        "br",
        "div",
        "em",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "i",
        "img",
        "li",
        "ol",
        "p",
        "span",
        "strong",
        "sub",
        "sup",
        "table",
        "tbody",
        "td",
        "th",
        "thead",
        "tr",
        "u",
        "ul",
    }
)
ALLOWED_DESCRIPTION_ATTRIBUTES: Final[dict[str, set[str]]] = {
    "a": {"href", "title"},
    "img": {"src", "alt", "title", "width", "height"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
}

_WHITESPACE = re.compile(r"[\s\u00a0\u202f]+")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_ZERO = Decimal(0)


def normalize_price(raw: str) -> Decimal:
    """Parse a feed price such as ``"1 234,50"``; anything unparsable becomes 0."""

    compact = _WHITESPACE.sub("", raw or "").replace(",", ".")
    match = _LEADING_NUMBER.match(compact)
    if match is None:
        return _ZERO
    try:
        value = Decimal(match.group(0))
    except InvalidOperation:
        return _ZERO
    if not value.is_finite() or value < 0:
        return _ZERO
    return value


def resolve_stock(marker: StockMarker | None) -> bool:
    if marker is None:
        return False

    presence_id = (marker.presence_id or "").strip()
    if presence_id and presence_id != "0":
        return True

    text = marker.text.strip().lower()
    if not text:
        return False
    return any(phrase in text for phrase in IN_STOCK_PHRASES)


def sanitize_description(raw: str) -> str:
    """Strip scripting and unsafe markup, keeping a bounded set of formatting tags."""

    if not raw or not raw.strip():
        return ""
    return nh3.clean(
        raw,
        tags=set(ALLOWED_DESCRIPTION_TAGS),
        attributes=ALLOWED_DESCRIPTION_ATTRIBUTES,
        url_schemes={"http", "https", "mailto"},
    ).strip()
