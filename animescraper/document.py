"""Markup parsing and the small node-selection surface the extractors use."""

from __future__ import annotations

import re
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag

from .errors import ParseError

# Elements whose contents never render as page text.
INVISIBLE_TAGS = ["script", "style", "template", "noscript"]

_TAG_RE = re.compile(r"<[A-Za-z!?/]")


def _normalize_text(raw: str) -> str:
    return " ".join(raw.split())


class Node:
    """A single element inside a parsed document."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name

    def text(self) -> str:
        return _normalize_text(self._tag.get_text())

    def attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return None
        # bs4 hands back multi-valued attributes (class, rel) as lists.
        if isinstance(value, list):
            return " ".join(value)
        return value

    def select_all(self, path: str) -> List["Node"]:
        return [Node(tag) for tag in self._tag.select(path)]

    def select_first(self, path: str) -> Optional["Node"]:
        tag = self._tag.select_one(path)
        return Node(tag) if tag is not None else None

    def __repr__(self) -> str:
        return f"Node({self.name!r}, text={self.text()[:40]!r})"


class Document(Node):
    """Root of a parsed page."""

    __slots__ = ()

    def __init__(self, soup: BeautifulSoup) -> None:
        super().__init__(soup)

    def contains_text(self, phrase: str) -> bool:
        return phrase in self.text()


def parse(data: Union[bytes, str]) -> Document:
    """Parse raw page bytes into a :class:`Document`.

    Raises:
        ParseError: when the bytes are not valid UTF-8 or hold no markup at all.
    """
    if isinstance(data, bytes):
        try:
            html = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(
                "document is not valid UTF-8",
                {"position": exc.start, "reason": exc.reason},
            ) from exc
    else:
        html = data

    if not _TAG_RE.search(html):
        raise ParseError("document contains no markup", {"length": len(html)})

    soup = BeautifulSoup(html, "lxml")
    for hidden in soup(INVISIBLE_TAGS):
        hidden.decompose()
    return Document(soup)
