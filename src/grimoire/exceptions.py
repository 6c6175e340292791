"""Exception hierarchy for grimoire.

All exceptions inherit from :class:`GrimoireError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`grimoire.exit_codes`.
The CLI entry point in :func:`grimoire.app.main` catches ``GrimoireError``
and exits with the appropriate code.

Every failure of the underlying transport is a :class:`FetchError`. Fetch
errors are never cached and never retried; they propagate unchanged to the
caller of :meth:`~grimoire.cache.fetch.CachedFetcher.fetch` and of the
``fetch_*`` methods on :class:`~grimoire.client.catalog.CatalogClient`.

Subclass hierarchy::

    GrimoireError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigError              (exit 1)
    +-- FetchError               (exit 5)
        +-- NotFoundError        (exit 4)
        +-- ServerError          (exit 5)
        +-- ConnectionError_     (exit 6)
        +-- InvalidResponseError (exit 5)
"""

from __future__ import annotations

from typing import Optional

from grimoire.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_FETCH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class GrimoireError(Exception):
    """Base exception for all grimoire errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GrimoireError):
    """Raised for invalid CLI arguments (e.g. an empty detail reference)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(GrimoireError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class FetchError(GrimoireError):
    """A request to the catalog service did not produce a usable payload.

    Args:
        message: Human-readable error description.
        url: The request URL (which is also the cache key).
        status_code: HTTP status, or ``None`` when no response was received.
    """

    exit_code = EXIT_FETCH_FAILURE

    def __init__(
        self,
        message: str,
        url: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NotFoundError(FetchError):
    """Raised when the catalog service returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(FetchError):
    """Raised for any other non-2xx status from the catalog service."""

    exit_code = EXIT_FETCH_FAILURE


class ConnectionError_(FetchError):
    """Raised on network-level failures (DNS resolution, connection refused, timeout).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class InvalidResponseError(FetchError):
    """Raised when a successful response body is not JSON or has the wrong shape."""

    exit_code = EXIT_FETCH_FAILURE
