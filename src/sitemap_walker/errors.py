"""Exception types raised by a sitemap walk."""

from typing import Any, Optional


class SitemapWalkerError(Exception):
    """Base class for every error that terminates a walk."""


class TransportError(SitemapWalkerError):
    """Fetching a resource failed outright."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Failed to fetch {url}")


class FetchTimeout(TransportError):
    """A single request exceeded its per-request timeout."""


class HTTPStatusError(TransportError):
    """A sitemap answered with a non-200 status and skipping is disabled."""

    def __init__(self, url: str, status_code: int):
        self.status_code = status_code
        super().__init__(url, f"Unexpected status {status_code} for sitemap {url}")


class WalkCancelled(TransportError):
    """The caller cancelled the walk before the next fetch."""

    def __init__(self, url: str):
        super().__init__(url, f"Walk cancelled before fetching {url}")


class DecodeError(SitemapWalkerError):
    """A payload could not be decompressed or is not a sitemap document."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to decode sitemap {url}: {message}")


class MaxItemsReached(SitemapWalkerError):
    """The configured item limit was reached.

    Raised after the item that reached the limit has been delivered, so
    callers can tell a satisfied walk from a broken one.
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Reached the maximum of {limit} items")


class MaxDepthExceeded(SitemapWalkerError):
    """Sitemap indexes were nested deeper than the configured limit."""

    def __init__(self, url: str, depth: int):
        self.url = url
        self.depth = depth
        super().__init__(f"Sitemap {url} is nested {depth} levels deep")


class ConsumerAbort(SitemapWalkerError):
    """The item consumer raised, aborting the walk."""

    def __init__(self, item: Any, error: BaseException):
        self.item = item
        self.error = error
        super().__init__(f"Consumer aborted the walk at {getattr(item, 'loc', item)}: {error}")
