"""Recursive sitemap walker streaming leaf items to a consumer."""

from typing import Callable, Iterator, Optional, Set, Any
import logging
import re
import threading

from sitemap_walker.crawler.decoder import decode
from sitemap_walker.crawler.fetcher import Fetcher
from sitemap_walker.crawler.robots_parser import PermissionGate, origin_of
from sitemap_walker.errors import (
    ConsumerAbort, HTTPStatusError, MaxDepthExceeded, MaxItemsReached, WalkCancelled
)
from sitemap_walker.models import DocumentKind, SitemapItem, WalkerConfig
from sitemap_walker.utils import is_bare_origin

DEFAULT_SITEMAP_PATH = '/sitemap.xml'

ItemCallback = Callable[[SitemapItem], Any]


class _WalkSession:
    """State owned by a single walk."""

    def __init__(self, walker: 'SitemapWalker', cancel: Optional[threading.Event]):
        self.emitted = 0
        self.visited: Set[str] = set()
        self.cancel = cancel
        self.gate: Optional[PermissionGate] = None
        if not walker.config.ignore_robots:
            self.gate = PermissionGate(
                walker.fetcher,
                user_agent=walker.config.user_agent,
                cancel_check=self.check_cancelled
            )

    def check_cancelled(self, url: str):
        if self.cancel is not None and self.cancel.is_set():
            raise WalkCancelled(url)


class SitemapWalker:
    """Walks sitemap index trees and streams the URLs they list."""

    def __init__(
        self,
        config: Optional[WalkerConfig] = None,
        session: Optional[Any] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize sitemap walker.

        Args:
            config: Walker configuration, reused across walks
            session: HTTP client override passed to the Fetcher
            logger: Diagnostic sink (defaults to the class logger)
        """
        self.config = config or WalkerConfig()
        self.fetcher = Fetcher(self.config, session)
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._include = [re.compile(p) for p in self.config.include]
        self._exclude = [re.compile(p) for p in self.config.exclude]

    def resolve_start(self, start_url: str) -> str:
        """Map a bare site root to its conventional sitemap location."""
        if is_bare_origin(start_url):
            sitemap_url = origin_of(start_url) + DEFAULT_SITEMAP_PATH
            self.logger.debug(f"No sitemap path in {start_url}, probing {sitemap_url}")
            return sitemap_url
        return start_url

    def _accepts(self, loc: str) -> bool:
        """Apply exclude then include patterns to an item location."""
        if any(p.search(loc) for p in self._exclude):
            return False
        if self._include and not any(p.search(loc) for p in self._include):
            return False
        return True

    def iter_items(self, start_url: str,
                   cancel: Optional[threading.Event] = None) -> Iterator[SitemapItem]:
        """
        Walk the sitemaps under ``start_url`` lazily.

        The returned generator is single-pass. When ``max_items`` is set,
        MaxItemsReached is raised right after the item that hits the limit
        has been yielded.

        Args:
            start_url: Sitemap, sitemap index or bare site root
            cancel: Event that stops the walk before its next request
        """
        session = _WalkSession(self, cancel)
        yield from self._visit(session, self.resolve_start(start_url), depth=0)

    def walk(self, start_url: str, on_item: ItemCallback,
             cancel: Optional[threading.Event] = None) -> None:
        """
        Walk the sitemaps under ``start_url`` and deliver each item to ``on_item``.

        Args:
            start_url: Sitemap, sitemap index or bare site root
            on_item: Called once per accepted item, in document order;
                raising aborts the walk
            cancel: Event that stops the walk before its next request

        Raises:
            MaxItemsReached: the item limit was reached (all items delivered)
            ConsumerAbort: ``on_item`` raised; the original error is the cause
            TransportError: a fetch failed, timed out or was cancelled
            DecodeError: a sitemap payload could not be decoded
            MaxDepthExceeded: sitemap indexes were nested too deeply
        """
        items = self.iter_items(start_url, cancel)
        try:
            for item in items:
                try:
                    on_item(item)
                except Exception as e:
                    raise ConsumerAbort(item, e) from e
        finally:
            items.close()

    def _visit(self, session: _WalkSession, url: str, depth: int) -> Iterator[SitemapItem]:
        if depth > self.config.max_depth:
            raise MaxDepthExceeded(url, depth)

        if url in session.visited:
            self.logger.warning(f"Skipping sitemap already visited in this walk: {url}")
            return
        session.visited.add(url)

        if session.gate is not None and not session.gate.allowed(url):
            self.logger.debug(f"robots.txt disallows {url}, skipping")
            return

        session.check_cancelled(url)
        result = self.fetcher.fetch(url, self.config.timeout)

        if not result.ok:
            if not self.config.skip_non_200:
                raise HTTPStatusError(url, result.status_code)
            self.logger.warning(
                f"skipping sitemap due to non-200 response: {url} (status {result.status_code})",
                extra={'sitemap_url': url, 'status_code': result.status_code}
            )
            return

        # Items reached through an index remember the sitemap they came from
        document = decode(url, result.content, source=url if depth > 0 else None)

        if document.kind == DocumentKind.SITEMAP_INDEX:
            self.logger.info(f"Found {len(document.sitemaps)} sitemaps in index {url}")
            for reference in document.sitemaps:
                yield from self._visit(session, reference.loc, depth + 1)
            return

        self.logger.info(f"Found {len(document.items)} URLs in sitemap {url}")
        limit = self.config.max_items
        for item in document.items:
            if not self._accepts(item.loc):
                continue

            session.emitted += 1
            yield item

            if limit and session.emitted >= limit:
                raise MaxItemsReached(limit)

    def close(self):
        """Release the underlying HTTP session."""
        self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def walk_sitemaps(start_url: str, on_item: ItemCallback,
                  config: Optional[WalkerConfig] = None,
                  cancel: Optional[threading.Event] = None,
                  **kwargs) -> None:
    """
    Walk sitemaps with a throwaway walker.

    Example:
        >>> found = []
        >>> walk_sitemaps('https://example.com', found.append)
    """
    with SitemapWalker(config, **kwargs) as walker:
        walker.walk(start_url, on_item, cancel)
