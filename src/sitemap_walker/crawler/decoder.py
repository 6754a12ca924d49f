"""Decoding of sitemap payloads into URL sets and sitemap indexes."""

from typing import Optional, List
from urllib.parse import urljoin, urlparse
from datetime import datetime, timedelta, timezone
import gzip
import logging
import re
import zlib

from lxml import etree

from sitemap_walker.errors import DecodeError
from sitemap_walker.models import (
    SitemapDocument, SitemapItem, SitemapReference,
    UrlSetDocument, SitemapIndexDocument
)

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'
GZIP_SUFFIXES = ('.gz', '.gzip')

# W3C datetime: YYYY, YYYY-MM, YYYY-MM-DD or a full timestamp with zone
LASTMOD_PATTERN = re.compile(
    r'^(?P<year>\d{4})'
    r'(?:-(?P<month>\d{2})'
    r'(?:-(?P<day>\d{2})'
    r'(?:T(?P<hour>\d{2}):(?P<minute>\d{2})'
    r'(?::(?P<second>\d{2})(?:\.(?P<fraction>\d+))?)?'
    r'(?P<tz>Z|[+-]\d{2}:\d{2})?)?)?)?$'
)

_parser = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    huge_tree=True
)


def is_gzip_url(url: str) -> bool:
    """Check whether the URL path names a compressed file."""
    return urlparse(url).path.lower().endswith(GZIP_SUFFIXES)


def decompress(url: str, content: bytes) -> bytes:
    """
    Decompress ``content`` when it carries the gzip magic bytes.

    A ``.gz`` URL whose body arrives without the magic was already inflated
    by the transport (Content-Encoding: gzip) and is returned unchanged.
    """
    if not content.startswith(GZIP_MAGIC):
        if is_gzip_url(url):
            logger.debug(f"{url} is not gzip on the wire, reading it as plain XML")
        return content

    try:
        return gzip.decompress(content)
    except (OSError, EOFError, zlib.error) as e:
        raise DecodeError(url, f"invalid gzip payload ({e})") from e


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a W3C datetime as used by <lastmod>.

    Args:
        value: Raw element text

    Returns:
        Timezone-aware datetime (UTC when no zone is given), or None
    """
    if not value:
        return None

    match = LASTMOD_PATTERN.match(value.strip())
    if not match:
        return None

    parts = match.groupdict()
    tz = timezone.utc
    if parts['tz'] and parts['tz'] != 'Z':
        sign = -1 if parts['tz'][0] == '-' else 1
        hours, minutes = parts['tz'][1:].split(':')
        tz = timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))

    fraction = parts['fraction'] or '0'
    try:
        return datetime(
            int(parts['year']),
            int(parts['month'] or 1),
            int(parts['day'] or 1),
            int(parts['hour'] or 0),
            int(parts['minute'] or 0),
            int(parts['second'] or 0),
            int(fraction[:6].ljust(6, '0')),
            tzinfo=tz
        )
    except ValueError:
        return None


def _local_name(element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ''
    return etree.QName(tag).localname


def _child_text(element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child) == name:
            text = (child.text or '').strip()
            return text or None
    return None


def _parse_priority(url: str, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        logger.debug(f"Ignoring invalid priority {value!r} in {url}")
        return None


def _parse_items(url: str, root, source: Optional[str]) -> List[SitemapItem]:
    items = []
    for entry in root:
        if _local_name(entry) != 'url':
            continue

        loc = _child_text(entry, 'loc')
        if not loc:
            continue

        lastmod_text = _child_text(entry, 'lastmod')
        lastmod = parse_lastmod(lastmod_text)
        if lastmod_text and lastmod is None:
            logger.debug(f"Ignoring invalid lastmod {lastmod_text!r} in {url}")

        items.append(SitemapItem(
            loc=urljoin(url, loc),
            lastmod=lastmod,
            changefreq=_child_text(entry, 'changefreq'),
            priority=_parse_priority(url, _child_text(entry, 'priority')),
            sitemap=source
        ))
    return items


def _parse_references(url: str, root) -> List[SitemapReference]:
    sitemaps = []
    for entry in root:
        if _local_name(entry) != 'sitemap':
            continue

        loc = _child_text(entry, 'loc')
        if not loc:
            continue

        sitemaps.append(SitemapReference(
            loc=urljoin(url, loc),
            lastmod=parse_lastmod(_child_text(entry, 'lastmod'))
        ))
    return sitemaps


def decode(url: str, content: bytes, source: Optional[str] = None) -> SitemapDocument:
    """
    Decode a fetched sitemap.

    Args:
        url: URL the payload was fetched from, used as the base for <loc>
        content: Raw response body
        source: Value recorded as ``sitemap`` on every decoded item

    Returns:
        UrlSetDocument or SitemapIndexDocument

    Raises:
        DecodeError: bad gzip, malformed XML or an unknown root element
    """
    payload = decompress(url, content)

    try:
        root = etree.fromstring(payload, parser=_parser)
    except etree.XMLSyntaxError as e:
        raise DecodeError(url, f"malformed XML ({e})") from e

    if root is None:
        raise DecodeError(url, "empty document")

    kind = _local_name(root)
    if kind == 'urlset':
        return UrlSetDocument(url=url, items=_parse_items(url, root, source))
    if kind == 'sitemapindex':
        return SitemapIndexDocument(url=url, sitemaps=_parse_references(url, root))

    raise DecodeError(url, f"unsupported root element <{kind}>")
