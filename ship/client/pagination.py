"""Page-by-page traversal of remote list endpoints.

A fetch function takes a page number and returns ``Ok(Page)`` or ``Err``.
Page 1 is the first page; a ``next_page`` of 0 marks the last one. The page
size and every other query parameter are bound into the fetch function by the
caller, so they cannot drift between pages of the same traversal.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ship.core.result import Err, Ok, Result

__all__ = [
    "FIRST_PAGE",
    "LAST_PAGE",
    "Page",
    "PageFetcher",
    "PageIterator",
    "collect",
    "find_first",
    "next_page_from_link",
]

FIRST_PAGE = 1
LAST_PAGE = 0

_NEXT_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel="next"')
_PAGE_PARAM_RE = re.compile(r"[?&]page=(\d+)")


@dataclass(frozen=True, slots=True)
class Page[T]:
    items: tuple[T, ...]
    next_page: int = LAST_PAGE

    @property
    def is_last(self) -> bool:
        return self.next_page == LAST_PAGE


type PageFetcher[T, E] = Callable[[int], Result[Page[T], E]]


def next_page_from_link(link_header: str | None) -> int:
    """Extract the ``rel="next"`` page number from a GitHub ``Link`` header."""
    if not link_header:
        return LAST_PAGE
    for part in link_header.split(","):
        m = _NEXT_LINK_RE.search(part)
        if m is None:
            continue
        page = _PAGE_PARAM_RE.search(m.group(1))
        if page is not None:
            return int(page.group(1))
    return LAST_PAGE


class PageIterator[T, E]:
    """Lazy, restartable iteration over the items of every page.

    Yields ``Ok(item)`` in provider order. On a fetch error it yields that
    ``Err`` once and stops. Each ``iter()`` starts again from page 1.
    """

    def __init__(self, fetch: PageFetcher[T, E]) -> None:
        self._fetch = fetch
        self.pages_fetched = 0

    def __iter__(self) -> Iterator[Result[T, E]]:
        page_number = FIRST_PAGE
        while True:
            result = self._fetch(page_number)
            self.pages_fetched += 1
            if isinstance(result, Err):
                yield result
                return
            page = result.value
            for item in page.items:
                yield Ok(item)
            if page.is_last:
                return
            page_number = page.next_page


def collect[T, E](fetch: PageFetcher[T, E]) -> Result[list[T], E]:
    """Fetch every page and return all items in order, or the first error."""
    out: list[T] = []
    for item in PageIterator(fetch):
        if isinstance(item, Err):
            return item
        out.append(item.value)
    return Ok(out)


def find_first[T, E](fetch: PageFetcher[T, E], predicate: Callable[[T], bool]) -> Result[T | None, E]:
    """Return the first item (in page order) matching ``predicate``.

    Stops fetching once a match is found. ``Ok(None)`` means every page was
    scanned without a match.
    """
    for item in PageIterator(fetch):
        if isinstance(item, Err):
            return item
        if predicate(item.value):
            return Ok(item.value)
    return Ok(None)
