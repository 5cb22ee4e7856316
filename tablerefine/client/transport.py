"""
Transport contract for the table engine.

The engine never talks HTTP itself. It asks a transport to reload the
current location with a parameter delta, to navigate somewhere, or to
post an action payload, and hands it the callbacks to run on completion.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import requests

from ..config import TableSettings, get_table_settings
from ..errors import TransportError
from .normalizer import merge_params

logger = logging.getLogger(__name__)

SAFE_METHODS = {"get", "head", "options", "trace"}

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class Transport(ABC):
    @abstractmethod
    def reload(
        self,
        data: dict[str, Any],
        *,
        only: Iterable[str] = (),
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        """Merge ``data`` into the current location and re-fetch it."""

    @abstractmethod
    def visit(
        self,
        href: str,
        *,
        method: str = "get",
        data: Optional[dict[str, Any]] = None,
        only: Iterable[str] = (),
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        """Navigate to ``href``."""

    @abstractmethod
    def post(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        """Post a JSON payload, typically to a table's action endpoint."""


def with_query(url: str, params: dict[str, Any]) -> str:
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=urlencode(params, doseq=True)))


def query_params(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=False))


class RequestsTransport(Transport):
    """
    Transport backed by a ``requests.Session``.

    The current location is tracked so reloads merge their delta into the
    query string the server last saw, and the relative links a snapshot
    carries are resolved against it. Unsafe requests echo the session's
    CSRF cookie in a header. Failures are handed to ``on_error`` unchanged;
    the transport never retries.
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        partial_header: str = "X-Table-Partial",
        headers: Optional[dict[str, str]] = None,
        csrf_cookie: str = "csrftoken",
        csrf_header: str = "X-CSRFToken",
    ):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.partial_header = partial_header
        self.csrf_cookie = csrf_cookie
        self.csrf_header = csrf_header
        self.headers = {"Accept": "application/json", **(headers or {})}

    @classmethod
    def from_settings(
        cls,
        url: str,
        settings: Optional[TableSettings] = None,
        **kwargs: Any,
    ) -> "RequestsTransport":
        """Build a transport using the configured timeout and partial header."""
        settings = settings or get_table_settings()
        kwargs.setdefault("timeout", settings.request_timeout_seconds)
        kwargs.setdefault("partial_header", settings.partial_header)
        return cls(url, **kwargs)

    def reload(
        self,
        data: dict[str, Any],
        *,
        only: Iterable[str] = (),
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        params = merge_params(query_params(self.url), data)
        target = with_query(self.url, params)
        self._send(
            "get",
            target,
            only=only,
            on_success=on_success,
            on_error=on_error,
            track=True,
            **options,
        )

    def visit(
        self,
        href: str,
        *,
        method: str = "get",
        data: Optional[dict[str, Any]] = None,
        only: Iterable[str] = (),
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        method = (method or "get").lower()
        if method == "get":
            if data:
                href = with_query(href, merge_params(query_params(href), data))
            self._send(
                "get",
                href,
                only=only,
                on_success=on_success,
                on_error=on_error,
                track=True,
                **options,
            )
            return
        self._send(
            method,
            href,
            json_body=data or {},
            only=only,
            on_success=on_success,
            on_error=on_error,
            **options,
        )

    def post(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> None:
        self._send(
            "post",
            url,
            json_body=payload,
            on_success=on_success,
            on_error=on_error,
            **options,
        )

    def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[dict[str, Any]] = None,
        only: Iterable[str] = (),
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        track: bool = False,
        headers: Optional[dict[str, str]] = None,
        **_options: Any,
    ) -> None:
        url = urljoin(self.url, url)
        request_headers = dict(self.headers)
        only = list(only)
        if only:
            request_headers[self.partial_header] = ",".join(only)
        if method.lower() not in SAFE_METHODS:
            token = self.session.cookies.get(self.csrf_cookie)
            if token:
                request_headers[self.csrf_header] = token
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s", method.upper(), url)
        try:
            response = self.session.request(
                method,
                url,
                json=json_body,
                headers=request_headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = _decode(response)
        except (requests.RequestException, ValueError) as exc:
            if on_error is not None:
                on_error(exc)
                return
            logger.warning("Request to %s failed: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", original=exc) from exc

        if track:
            self.url = response.url or url
        if on_success is not None:
            on_success(body)


def _decode(response: requests.Response) -> Any:
    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type:
        return response.json()
    if not response.content:
        return None
    try:
        return json.loads(response.content)
    except ValueError:
        return response.text
