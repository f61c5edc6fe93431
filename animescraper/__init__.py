"""animescraper package exports."""

from .models import (
    Category,
    CacheState,
    ListingStatus,
    ListingEntry,
    ListingResult,
    DetailRecord,
    PageState,
    CacheEntry,
)
from .errors import AnimeScraperError, ParseError, FieldMissing, NetworkError, AssetFetchError
from .document import Document, Node, parse
from .listing import extract_listing
from .detail import extract_detail
from .asset_cache import AssetCache, AssetRequest
from .catalog import CatalogClient, listing_url, detail_url
from .pagination import PaginationController, ListingSnapshot
from .transport import Transport, HttpTransport
from .output import ResultWriter, PrintWriter, JsonLinesWriter, JsonWriter, CsvWriter

__all__ = [
    "Category",
    "CacheState",
    "ListingStatus",
    "ListingEntry",
    "ListingResult",
    "DetailRecord",
    "PageState",
    "CacheEntry",
    "AnimeScraperError",
    "ParseError",
    "FieldMissing",
    "NetworkError",
    "AssetFetchError",
    "Document",
    "Node",
    "parse",
    "extract_listing",
    "extract_detail",
    "AssetCache",
    "AssetRequest",
    "CatalogClient",
    "listing_url",
    "detail_url",
    "PaginationController",
    "ListingSnapshot",
    "Transport",
    "HttpTransport",
    "ResultWriter",
    "PrintWriter",
    "JsonLinesWriter",
    "JsonWriter",
    "CsvWriter",
]
