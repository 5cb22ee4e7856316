"""Navigation over the four paginator shapes."""

from __future__ import annotations

from typing import Optional

from ..types import LengthAwarePaginator, PageLink, Paginator

NEXT = "next"
PREVIOUS = "previous"
FIRST = "first"
LAST = "last"

_LINK_ATTRIBUTES = {
    NEXT: "next_link",
    PREVIOUS: "prev_link",
    FIRST: "first_link",
    LAST: "last_link",
}


def navigation_link(paginator: Paginator, where: str) -> Optional[str]:
    """
    Return the server-computed link for ``where``, if the shape has one.

    Collections have no links, cursor and simple paginators only move
    forwards and backwards, and only length-aware paginators know their
    first and last pages.
    """
    attribute = _LINK_ATTRIBUTES.get(where)
    if attribute is None:
        return None
    return getattr(paginator, attribute, None) or None


def page_links(paginator: Paginator) -> tuple[PageLink, ...]:
    if isinstance(paginator, LengthAwarePaginator):
        return paginator.links
    return ()


def current_page(paginator: Paginator) -> Optional[int]:
    return getattr(paginator, "current_page", None)


def total(paginator: Paginator) -> Optional[int]:
    if isinstance(paginator, LengthAwarePaginator):
        return paginator.total
    return None
