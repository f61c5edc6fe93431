"""Catalog page extraction."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlsplit

from .config import settings
from .document import Document, Node
from .models import ListingEntry, ListingResult
from .queries import LISTING, ListingSelectors

logger = logging.getLogger(__name__)


def parse_page_number(href: Optional[str], param: str = "page") -> Optional[int]:
    """Return the positive integer held in ``param`` of ``href``, else None."""
    if not href:
        return None
    values = parse_qs(urlsplit(href.strip()).query).get(param)
    if not values:
        return None
    try:
        number = int(values[-1])
    except ValueError:
        return None
    return number if number >= 1 else None


def extract_listing(
    doc: Document,
    selectors: ListingSelectors = LISTING,
    marker: Optional[str] = None,
) -> ListingResult:
    """Turn a parsed catalog page into entries plus pagination metadata."""
    marker = settings.no_results_marker if marker is None else marker
    if marker and doc.contains_text(marker):
        return ListingResult(entries=[], no_results=True, total_pages=1)

    entries: List[ListingEntry] = []
    skipped = 0
    for index, node in enumerate(doc.select_all(selectors.item)):
        entry = _extract_entry(node, selectors)
        if entry is None:
            skipped += 1
            logger.warning("Skipping catalog item #%d: missing title, poster or link", index)
            continue
        entries.append(entry)

    total_pages, resolved = _extract_total_pages(doc, selectors)
    return ListingResult(
        entries=entries,
        no_results=not entries,
        total_pages=total_pages,
        pagination_resolved=resolved,
        skipped=skipped,
    )


def _extract_entry(node: Node, selectors: ListingSelectors) -> Optional[ListingEntry]:
    anchor = node.select_first(selectors.name)
    image = node.select_first(selectors.poster)
    if anchor is None or image is None:
        return None

    title = anchor.text()
    detail_url = (anchor.attribute("href") or "").strip()
    poster_url = (image.attribute(selectors.poster_attr) or "").strip()
    if not (title and detail_url and poster_url):
        return None
    return ListingEntry(title=title, poster_url=poster_url, detail_url=detail_url)


def _extract_total_pages(doc: Document, selectors: ListingSelectors) -> tuple[int, bool]:
    """Return ``(total_pages, resolved)``; an absent last-page link counts as resolved."""
    link = doc.select_first(selectors.last_page)
    if link is None:
        return 1, True
    href = link.attribute("href")
    number = parse_page_number(href, selectors.page_param)
    if number is None:
        logger.warning("Could not read page count from last-page link %r; assuming 1", href)
        return 1, False
    return number, True
