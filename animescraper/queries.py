"""Named structural queries for the catalog site's markup.

Bump ``SELECTOR_VERSION`` whenever the upstream markup changes and a query
below is edited.
"""

from __future__ import annotations

from dataclasses import dataclass

SELECTOR_VERSION = "2024.1"


@dataclass(frozen=True)
class ListingSelectors:
    item: str = "div.item"
    name: str = "a.name"
    poster: str = "img"
    poster_attr: str = "src"
    last_page: str = "ul.pagination li a[rel=last]"
    page_param: str = "page"


@dataclass(frozen=True)
class DetailSelectors:
    title: str = "h1[itemprop=name]"
    synopsis: str = "div.synopsis.mb-3 div.content"
    poster: str = "div.binfo div.poster img"
    meta_rows: str = "div.bmeta div.meta div"
    type_label: str = "Type"
    episodes_label: str = "Episodes"
    premiered_label: str = "Premiered"
    aired_label: str = "Date aired"


LISTING = ListingSelectors()
DETAIL = DetailSelectors()
