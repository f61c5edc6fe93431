"""Tests for catalog page extraction."""

from __future__ import annotations

import pytest

from animescraper import extract_listing, parse
from animescraper.listing import parse_page_number


def _item(title: str, href: str, src: str | None) -> str:
    img = f'<img src="{src}" alt="{title}">' if src is not None else f'<img alt="{title}">'
    return f"""
    <div class="item">
      <div class="poster"><a href="{href}">{img}</a></div>
      <div class="info"><a class="name d-title" href="{href}">{title}</a></div>
    </div>
    """


def _page(items: str, last_href: str | None = None, extra: str = "") -> str:
    pagination = ""
    if last_href is not None:
        pagination = f"""
        <ul class="pagination">
          <li class="page-item"><a class="page-link" href="/filter?keyword=a&page=2" rel="next">›</a></li>
          <li class="page-item"><a class="page-link" href="{last_href}" rel="last">»</a></li>
        </ul>
        """
    return f"<html><body><div class='ani items'>{items}</div>{pagination}{extra}</body></html>"


def test_malformed_item_is_skipped_and_page_count_read():
    html = _page(
        _item("Alpha", "/watch/alpha.1", "https://static.example/a.jpg")
        + _item("Beta", "/watch/beta.2", "https://static.example/b.jpg")
        + _item("Gamma", "/watch/gamma.3", None),
        last_href="/filter?keyword=a&page=5",
    )
    result = extract_listing(parse(html))

    assert [entry.title for entry in result.entries] == ["Alpha", "Beta"]
    assert result.entries[0].poster_url == "https://static.example/a.jpg"
    assert result.entries[1].detail_url == "/watch/beta.2"
    assert result.total_pages == 5
    assert result.pagination_resolved
    assert result.skipped == 1
    assert not result.no_results


def test_complete_items_all_extracted():
    items = "".join(_item(f"T{i}", f"/watch/t.{i}", f"https://img/{i}.jpg") for i in range(7))
    result = extract_listing(parse(_page(items)))
    assert len(result.entries) == 7
    assert result.total_pages == 1


def test_no_results_marker_wins_over_items():
    html = _page(
        _item("Alpha", "/watch/alpha.1", "https://static.example/a.jpg"),
        last_href="/filter?page=9",
        extra="<p>No matching records found</p>",
    )
    result = extract_listing(parse(html))
    assert result.no_results
    assert result.entries == []
    assert result.total_pages == 1


def test_all_items_skipped_counts_as_no_results():
    result = extract_listing(parse(_page(_item("", "/watch/x.1", "https://img/x.jpg"))))
    assert result.entries == []
    assert result.no_results
    assert result.skipped == 1


def test_unparsable_last_page_link_is_flagged():
    html = _page(_item("Alpha", "/watch/alpha.1", "https://img/a.jpg"), last_href="/trending-anime/?page=last")
    result = extract_listing(parse(html))
    assert result.total_pages == 1
    assert not result.pagination_resolved


def test_entries_have_distinct_identity_even_with_equal_content():
    item = _item("Same", "/watch/same.1", "https://img/s.jpg")
    result = extract_listing(parse(_page(item + item)))
    first, second = result.entries
    assert first == second
    assert first.id != second.id


@pytest.mark.parametrize(
    "href, expected",
    [
        ("/filter?keyword=naruto&page=12", 12),
        ("https://aniwave.se/trending-anime/?page=3", 3),
        ("/filter?keyword=a", None),
        ("/filter?page=0", None),
        ("/filter?page=abc", None),
        (None, None),
    ],
)
def test_parse_page_number(href, expected):
    assert parse_page_number(href) == expected
