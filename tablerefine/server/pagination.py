"""
Paginate a refined queryset into one of four shapes.

Links are built from the current query string with only the position
parameter replaced, so every other refinement survives navigation.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from django.core.paginator import Paginator
from django.db.models import QuerySet

logger = logging.getLogger(__name__)

LinkBuilder = Callable[[dict[str, Any]], str]


@dataclass
class Page:
    records: list[Any]
    paginator: dict[str, Any]


def encode_cursor(offset: int) -> str:
    return base64.urlsafe_b64encode(f"o:{offset}".encode("ascii")).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> int:
    if not cursor:
        return 0
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("ascii")
    except (binascii.Error, UnicodeError, ValueError):
        logger.debug("Ignoring malformed cursor '%s'", cursor)
        return 0
    prefix, _, offset = decoded.partition(":")
    if prefix != "o" or not offset.isdigit():
        return 0
    return int(offset)


def _page_number(raw: Any) -> int:
    try:
        return max(int(raw), 1)
    except (TypeError, ValueError):
        return 1


def paginate_collection(queryset: QuerySet) -> Page:
    records = list(queryset)
    return Page(records, {"type": "collection", "empty": not records})


def paginate_simple(
    queryset: QuerySet, *, per_page: int, page: Any, page_key: str, link: LinkBuilder
) -> Page:
    number = _page_number(page)
    offset = (number - 1) * per_page
    window = list(queryset[offset : offset + per_page + 1])
    records = window[:per_page]
    return Page(
        records,
        {
            "type": "simple",
            "empty": not records,
            "perPage": per_page,
            "currentPage": number,
            "prevLink": link({page_key: number - 1}) if number > 1 else None,
            "nextLink": link({page_key: number + 1}) if len(window) > per_page else None,
        },
    )


def paginate_cursor(
    queryset: QuerySet, *, per_page: int, cursor: Any, cursor_key: str, link: LinkBuilder
) -> Page:
    offset = decode_cursor(cursor)
    window = list(queryset[offset : offset + per_page + 1])
    records = window[:per_page]
    prev_link = None
    if offset > 0:
        previous = max(offset - per_page, 0)
        prev_link = link({cursor_key: encode_cursor(previous) if previous else None})
    return Page(
        records,
        {
            "type": "cursor",
            "empty": not records,
            "perPage": per_page,
            "prevLink": prev_link,
            "nextLink": link({cursor_key: encode_cursor(offset + per_page)})
            if len(window) > per_page
            else None,
        },
    )


def paginate_length_aware(
    queryset: QuerySet, *, per_page: int, page: Any, page_key: str, link: LinkBuilder
) -> Page:
    paginator = Paginator(queryset, per_page)
    current = paginator.get_page(page)
    records = list(current.object_list)
    number = current.number

    links = []
    for item in paginator.get_elided_page_range(number, on_each_side=2, on_ends=1):
        if item == Paginator.ELLIPSIS:
            links.append({"url": None, "label": str(item), "active": False})
        else:
            links.append({"url": link({page_key: item}), "label": str(item), "active": item == number})

    return Page(
        records,
        {
            "type": "length-aware",
            "empty": not records,
            "perPage": per_page,
            "currentPage": number,
            "total": paginator.count,
            "from": current.start_index() if records else None,
            "to": current.end_index() if records else None,
            "lastPage": paginator.num_pages,
            "prevLink": link({page_key: current.previous_page_number()}) if current.has_previous() else None,
            "nextLink": link({page_key: current.next_page_number()}) if current.has_next() else None,
            "firstLink": link({page_key: 1}),
            "lastLink": link({page_key: paginator.num_pages}),
            "links": links,
        },
    )


def paginate(
    queryset: QuerySet,
    shape: str,
    *,
    per_page: int,
    params: dict[str, Any],
    page_key: str,
    cursor_key: str,
    link: LinkBuilder,
) -> Page:
    if shape == "collection":
        return paginate_collection(queryset)
    if shape == "cursor":
        return paginate_cursor(
            queryset, per_page=per_page, cursor=params.get(cursor_key), cursor_key=cursor_key, link=link
        )
    if shape == "simple":
        return paginate_simple(
            queryset, per_page=per_page, page=params.get(page_key), page_key=page_key, link=link
        )
    return paginate_length_aware(
        queryset, per_page=per_page, page=params.get(page_key), page_key=page_key, link=link
    )
