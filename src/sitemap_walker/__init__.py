"""
sitemap-walker: stream the URLs described by a website's sitemaps.

This module provides both a CLI interface and a scriptable API for walking
sitemap index trees, honouring robots.txt, filtering URLs and reporting
lastmod/changefreq/priority metadata as items are discovered.
"""

__version__ = "0.1.0"

from sitemap_walker.config import Config, load_config
from sitemap_walker.models import (
    SitemapItem, SitemapReference, DocumentKind,
    UrlSetDocument, SitemapIndexDocument,
    WalkerConfig, BrowserProfile, OutputFormat
)
from sitemap_walker.errors import (
    SitemapWalkerError, TransportError, FetchTimeout, HTTPStatusError,
    WalkCancelled, DecodeError, MaxItemsReached, MaxDepthExceeded, ConsumerAbort
)
from sitemap_walker.crawler import (
    Fetcher, FetchResult, PermissionGate, RobotsRules, SitemapWalker,
    decode, walk_sitemaps
)

__all__ = [
    # Main classes
    'SitemapWalker',
    'Fetcher',
    'PermissionGate',
    'RobotsRules',
    'Config',

    # Models
    'SitemapItem',
    'SitemapReference',
    'DocumentKind',
    'UrlSetDocument',
    'SitemapIndexDocument',
    'FetchResult',
    'WalkerConfig',
    'BrowserProfile',
    'OutputFormat',

    # Errors
    'SitemapWalkerError',
    'TransportError',
    'FetchTimeout',
    'HTTPStatusError',
    'WalkCancelled',
    'DecodeError',
    'MaxItemsReached',
    'MaxDepthExceeded',
    'ConsumerAbort',

    # Functions
    'load_config',
    'decode',
    'walk_sitemaps',
    'collect_items'
]


def collect_items(start_url: str, config: WalkerConfig = None, **kwargs) -> list:
    """
    Walk sitemaps and return the discovered items as a list.

    Reaching ``max_items`` is not treated as an error here; the items
    collected up to the limit are returned.

    Example:
        >>> items = collect_items('https://example.com/sitemap.xml')
        >>> print(f"Found {len(items)} URLs")
    """
    items = []
    try:
        walk_sitemaps(start_url, items.append, config=config, **kwargs)
    except MaxItemsReached:
        pass
    return items
