"""Parse the raw feed document into item payloads."""

from __future__ import annotations

from logging import getLogger

from lxml import etree
from pydantic import ValidationError

from feedsync.domain.feed_sync.errors import FeedParseError

from .schema import ITEM_CONTAINER, ITEM_ELEMENT, KNOWN_FIELDS, STOCK_FIELD, FeedItemPayload

log = getLogger(__name__)


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, strip_cdata=True)


def parse_feed_document(body: bytes) -> list[FeedItemPayload]:
    """Return one payload per ``<izdelek>`` under ``<izdelki>``.

    Raises ``FeedParseError`` for malformed XML or when no item can be found.
    """

    try:
        root = etree.fromstring(body, parser=_xml_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise FeedParseError(f"Malformed XML feed: {exc}") from exc
    if root is None:
        raise FeedParseError("Empty XML feed")

    container = _first_child(root, ITEM_CONTAINER)
    elements = _children(container, ITEM_ELEMENT) if container is not None else []
    if not elements:
        raise FeedParseError("No products found in XML feed")

    payloads = [_payload_from_element(element) for element in elements]
    log.debug("Parsed %s feed items", len(payloads))
    return payloads


def _payload_from_element(element: etree._Element) -> FeedItemPayload:
    data: dict[str, object] = {}
    for child in element:
        name = _local_name(child)
        if name is None:
            continue
        # scalar fields keep their first occurrence, image fields their last
        if name in KNOWN_FIELDS and name in data:
            continue
        if name == STOCK_FIELD:
            data[name] = {"id": child.get("id"), "text": _inner_text(child)}
        else:
            data[name] = _inner_text(child)

    try:
        return FeedItemPayload.model_validate(data)
    except ValidationError as exc:
        raise FeedParseError(f"Unexpected feed item shape: {exc}") from exc


def _inner_text(element: etree._Element) -> str:
    if len(element) == 0:
        return element.text or ""
    parts = [element.text or ""]
    parts.extend(etree.tostring(child, encoding="unicode") for child in element)
    return "".join(parts)


def _local_name(element: etree._Element) -> str | None:
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _first_child(element: etree._Element, name: str) -> etree._Element | None:
    for child in element:
        if _local_name(child) == name:
            return child
    return None


def _children(element: etree._Element, name: str) -> list[etree._Element]:
    return [child for child in element if _local_name(child) == name]
