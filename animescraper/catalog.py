"""Catalog site client: URL shapes plus fetch, parse and extract."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote, urlencode, urljoin

from .config import Settings, settings as default_settings
from .detail import extract_detail
from .document import parse
from .listing import extract_listing
from .models import DetailRecord, ListingResult
from .transport import Transport

logger = logging.getLogger(__name__)


def listing_url(query: str = "", page: int = 1, config: Optional[Settings] = None) -> str:
    """Trending endpoint for an empty query, keyword filter otherwise."""
    config = config or default_settings
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    base = config.base_url.rstrip("/")
    query = query.strip()
    if not query:
        return f"{base}{config.trending_path}?{urlencode({'page': page})}"
    params = urlencode({"keyword": query, "page": page}, quote_via=quote)
    return f"{base}{config.filter_path}?{params}"


def detail_url(path: str, config: Optional[Settings] = None) -> str:
    """Resolve a listing ``detail_url`` against the site's origin."""
    config = config or default_settings
    return urljoin(config.base_url.rstrip("/") + "/", path.strip())


class CatalogClient:
    """Fetch listing and detail pages through a transport.

    Network and parse failures are raised to the caller unchanged; nothing is
    retried here.
    """

    def __init__(self, transport: Transport, config: Optional[Settings] = None) -> None:
        self.transport = transport
        self.config = config or default_settings

    async def fetch_listing(self, query: str = "", page: int = 1) -> ListingResult:
        url = listing_url(query, page, self.config)
        logger.info("Fetching listing %s", url)
        data = await self.transport.fetch(url)
        result = extract_listing(parse(data), marker=self.config.no_results_marker)
        logger.info(
            "Listing %r page %d: %d entries, %d pages%s",
            query,
            page,
            len(result.entries),
            result.total_pages,
            "" if result.pagination_resolved else " (pagination unresolved)",
        )
        return result

    async def fetch_detail(self, path: str) -> DetailRecord:
        url = detail_url(path, self.config)
        logger.info("Fetching detail %s", url)
        data = await self.transport.fetch(url)
        return extract_detail(parse(data))
