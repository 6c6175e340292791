"""Asynchronous transport for the catalog service.

This module provides :class:`AsyncClient`, a thin wrapper around
:class:`httpx.AsyncClient` that performs a single GET of a fully resolved
URL and returns the decoded JSON body. Every way a request can fail is
mapped onto :class:`~grimoire.exceptions.FetchError` subclasses:

* network failure -> :class:`~grimoire.exceptions.ConnectionError_`
* HTTP 404 -> :class:`~grimoire.exceptions.NotFoundError`
* any other non-2xx -> :class:`~grimoire.exceptions.ServerError`
* 2xx with a body that is not JSON ->
  :class:`~grimoire.exceptions.InvalidResponseError`

There is no retry. A failed request is reported once, to the caller that
issued it.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from grimoire.exceptions import (
    ConnectionError_,
    InvalidResponseError,
    NotFoundError,
    ServerError,
)
from grimoire.models import RequestConfig
from grimoire.output import get_output


class AsyncClient:
    """Non-blocking JSON GET client. Must be used as an async context manager.

    Args:
        config: Request settings (timeout and SSL verification). A
            ``timeout_seconds`` of ``None`` lets a hung request wait
            indefinitely.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        async with AsyncClient(RequestConfig()) as client:
            data = await client.get_json("https://www.dnd5eapi.co/api/classes")
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`. Safe to call twice."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def get(self, url: str) -> httpx.Response:
        """Send a GET request and return the response if its status is 2xx.

        Args:
            url: Absolute request URL.

        Returns:
            The successful :class:`httpx.Response`.

        Raises:
            NotFoundError: On 404.
            ServerError: On any other non-2xx status.
            ConnectionError_: On network / timeout errors.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        get_output().debug(f"GET {url}")
        try:
            response = await self._client.get(url)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Request to {url} failed: {exc}", url=url) from exc

        self._map_response_error(url, response)
        return response

    async def get_json(self, url: str) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises:
            InvalidResponseError: If the body of a 2xx response is not JSON.
            FetchError: Any error raised by :meth:`get`.
        """
        response = await self.get(url)
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseError(
                f"Response from {url} is not valid JSON: {exc}",
                url=url,
                status_code=response.status_code,
            ) from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _map_response_error(self, url: str, response: httpx.Response) -> None:
        """Raise a typed exception for non-success HTTP status codes."""
        status = response.status_code
        if response.is_success:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status} for {url}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status == 404:
            raise NotFoundError(full_msg, url=url, status_code=status)
        raise ServerError(full_msg, url=url, status_code=status)
