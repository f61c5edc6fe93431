"""Item detail page extraction.

Every field is read on its own; a missing or malformed field falls back to its
default without affecting the others.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, TypeVar

from .document import Document, Node
from .errors import FieldMissing
from .models import Category, DetailRecord
from .queries import DETAIL, DetailSelectors

logger = logging.getLogger(__name__)

T = TypeVar("T")

_YEAR_RE = re.compile(r"\b(\d{4})\b")


def extract_detail(doc: Document, selectors: DetailSelectors = DETAIL) -> DetailRecord:
    defaults = DetailRecord()
    return DetailRecord(
        title=_field("title", lambda: _title(doc, selectors), defaults.title),
        synopsis=_field("synopsis", lambda: _synopsis(doc, selectors), defaults.synopsis),
        category=_field("category", lambda: _category(doc, selectors), defaults.category),
        episode_count=_field("episode_count", lambda: _episodes(doc, selectors), defaults.episode_count),
        premiere_year=_field("premiere_year", lambda: _premiere_year(doc, selectors), defaults.premiere_year),
        poster_url=_field("poster_url", lambda: _poster(doc, selectors), defaults.poster_url),
    )


def _field(name: str, extractor: Callable[[], T], default: T) -> T:
    try:
        return extractor()
    except FieldMissing as exc:
        logger.debug("Detail field %s defaulted: %s", name, exc.message)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.debug("Detail field %s defaulted after %s: %s", name, type(exc).__name__, exc)
    return default


def _required_text(node: Optional[Node], field: str) -> str:
    if node is None:
        raise FieldMissing(field)
    text = node.text()
    if not text:
        raise FieldMissing(field, f"field {field!r} is empty")
    return text


def _meta_row(doc: Document, selectors: DetailSelectors, label: str) -> Optional[Node]:
    """First metadata row whose text starts with ``label``."""
    prefix = label.lower()
    for row in doc.select_all(selectors.meta_rows):
        if row.text().lower().startswith(prefix):
            return row
    return None


def _meta_value(doc: Document, selectors: DetailSelectors, label: str, child: str, field: str) -> str:
    row = _meta_row(doc, selectors, label)
    if row is None:
        raise FieldMissing(field)
    node = row.select_first(child)
    if node is not None and node.text():
        return node.text()
    # "Label: value" rows without a wrapping child element.
    _, _, rest = row.text().partition(":")
    if not rest.strip():
        raise FieldMissing(field, f"field {field!r} is empty")
    return rest.strip()


def _title(doc: Document, selectors: DetailSelectors) -> str:
    return _required_text(doc.select_first(selectors.title), "title")


def _synopsis(doc: Document, selectors: DetailSelectors) -> str:
    return _required_text(doc.select_first(selectors.synopsis), "synopsis")


def _category(doc: Document, selectors: DetailSelectors) -> Category:
    row = _meta_row(doc, selectors, selectors.type_label)
    if row is None:
        raise FieldMissing("category")
    return Category.from_label(_required_text(row.select_first("a"), "category"))


def _episodes(doc: Document, selectors: DetailSelectors) -> int:
    count = int(_meta_value(doc, selectors, selectors.episodes_label, "span", "episode_count"))
    if count < 0:
        raise FieldMissing("episode_count", f"negative episode count {count}")
    return count


def _premiere_year(doc: Document, selectors: DetailSelectors) -> Optional[str]:
    for label, child in ((selectors.premiered_label, "a"), (selectors.aired_label, "span")):
        try:
            value = _meta_value(doc, selectors, label, child, "premiere_year")
        except FieldMissing:
            continue
        match = _YEAR_RE.search(value)
        if match:
            return match.group(1)
    raise FieldMissing("premiere_year")


def _poster(doc: Document, selectors: DetailSelectors) -> Optional[str]:
    node = doc.select_first(selectors.poster)
    src = node.attribute("src") if node is not None else None
    if not src or not src.strip():
        raise FieldMissing("poster_url")
    return src.strip()
