"""Sitemap discovery: fetching, decoding, robots.txt and the recursive walk."""

from .fetcher import Fetcher, FetchResult
from .decoder import decode, parse_lastmod, is_gzip_url
from .robots_parser import PermissionGate, RobotsRules
from .walker import SitemapWalker, walk_sitemaps

__all__ = [
    'Fetcher',
    'FetchResult',
    'decode',
    'parse_lastmod',
    'is_gzip_url',
    'PermissionGate',
    'RobotsRules',
    'SitemapWalker',
    'walk_sitemaps'
]
