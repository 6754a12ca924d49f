"""Tests for sitemap payload decoding."""

import gzip
from datetime import datetime, timedelta, timezone

import pytest

from sitemap_walker import DecodeError, DocumentKind
from sitemap_walker.crawler.decoder import decode, is_gzip_url, parse_lastmod
from tests.sitemaps import sitemapindex, urlset

BASE = 'https://example.com/maps/sitemap.xml'


class TestDecode:
    """Test document kind detection and entry parsing."""

    def test_urlset(self):
        document = decode(BASE, urlset('/a', 'b').encode())

        assert document.kind == DocumentKind.URLSET
        assert [i.loc for i in document.items] == [
            'https://example.com/a',
            'https://example.com/maps/b',
        ]

    def test_sitemap_index(self):
        document = decode(BASE, sitemapindex('/child-1.xml', 'https://cdn.example.com/child-2.xml').encode())

        assert document.kind == DocumentKind.SITEMAP_INDEX
        assert [s.loc for s in document.sitemaps] == [
            'https://example.com/child-1.xml',
            'https://cdn.example.com/child-2.xml',
        ]

    def test_without_namespace(self):
        document = decode(BASE, b'<urlset><url><loc>/plain</loc></url></urlset>')

        assert document.kind == DocumentKind.URLSET
        assert document.items[0].loc == 'https://example.com/plain'

    def test_source_is_recorded(self):
        document = decode(BASE, urlset('/a').encode(), source=BASE)

        assert document.items[0].sitemap == BASE

    def test_entries_without_loc_are_dropped(self):
        payload = (
            b'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            b'<url><lastmod>2024-01-01</lastmod></url>'
            b'<url><loc>   </loc></url>'
            b'<url><loc> /kept </loc></url>'
            b'</urlset>'
        )
        document = decode(BASE, payload)

        assert [i.loc for i in document.items] == ['https://example.com/kept']

    def test_metadata(self):
        payload = b"""<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
          <url>
            <loc>https://example.com/page</loc>
            <lastmod>2024-03-05T10:20:30+02:00</lastmod>
            <changefreq>weekly</changefreq>
            <priority>1.5</priority>
          </url>
        </urlset>"""
        item = decode(BASE, payload).items[0]

        assert item.lastmod == datetime(2024, 3, 5, 8, 20, 30, tzinfo=timezone.utc)
        assert item.changefreq == 'weekly'
        # Priority is not clamped
        assert item.priority == 1.5

    def test_invalid_metadata_is_ignored(self):
        payload = b"""<urlset>
          <url><loc>/page</loc><lastmod>yesterday</lastmod><priority>high</priority></url>
        </urlset>"""
        item = decode(BASE, payload).items[0]

        assert item.lastmod is None
        assert item.priority is None

    def test_unknown_root(self):
        with pytest.raises(DecodeError, match='unsupported root'):
            decode(BASE, b'<html><body>Not found</body></html>')

    def test_malformed_xml(self):
        with pytest.raises(DecodeError, match='malformed XML'):
            decode(BASE, b'<urlset><url><loc>/x</loc>')

    def test_empty_payload(self):
        with pytest.raises(DecodeError):
            decode(BASE, b'')

    def test_entities_are_not_expanded(self):
        payload = b"""<?xml version="1.0"?>
        <!DOCTYPE urlset [<!ENTITY secret SYSTEM "file:///etc/passwd">]>
        <urlset><url><loc>/page&secret;</loc></url></urlset>"""
        document = decode(BASE, payload)

        assert 'root:' not in document.items[0].loc


class TestGzip:
    """Test transparent decompression."""

    def test_gz_suffix(self):
        url = 'https://example.com/sitemap.xml.gz'
        document = decode(url, gzip.compress(urlset('/zipped').encode()))

        assert document.items[0].loc == 'https://example.com/zipped'

    def test_magic_bytes_without_suffix(self):
        document = decode(BASE, gzip.compress(urlset('/zipped').encode()))

        assert document.items[0].loc == 'https://example.com/zipped'

    def test_gz_suffix_with_inflated_payload(self):
        """Test a .gz body already inflated by the transport is read as XML."""
        document = decode('https://example.com/sitemap.xml.gz', urlset('/plain').encode())

        assert [item.loc for item in document.items] == ['https://example.com/plain']

    def test_gz_suffix_with_garbage_fails(self):
        with pytest.raises(DecodeError, match='malformed XML'):
            decode('https://example.com/sitemap.xml.gz', b'definitely not a sitemap')

    def test_truncated_gzip(self):
        payload = gzip.compress(urlset('/a', '/b').encode())[:20]

        with pytest.raises(DecodeError):
            decode('https://example.com/sitemap.xml.gz', payload)

    @pytest.mark.parametrize('url,expected', [
        ('https://example.com/sitemap.xml.gz', True),
        ('https://example.com/SITEMAP.XML.GZ', True),
        ('https://example.com/sitemap.xml.gz?v=2', True),
        ('https://example.com/sitemap.xml', False),
        ('https://example.com/gz/sitemap.xml', False),
    ])
    def test_is_gzip_url(self, url, expected):
        assert is_gzip_url(url) is expected


class TestLastmod:
    """Test the W3C datetime grammar."""

    @pytest.mark.parametrize('value,expected', [
        ('2024', datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ('2024-05', datetime(2024, 5, 1, tzinfo=timezone.utc)),
        ('2024-05-17', datetime(2024, 5, 17, tzinfo=timezone.utc)),
        ('2024-05-17T08:30Z', datetime(2024, 5, 17, 8, 30, tzinfo=timezone.utc)),
        ('2024-05-17T08:30:15Z', datetime(2024, 5, 17, 8, 30, 15, tzinfo=timezone.utc)),
        ('2024-05-17T08:30:15.25Z', datetime(2024, 5, 17, 8, 30, 15, 250000, tzinfo=timezone.utc)),
        ('2024-05-17T08:30:15-05:00',
         datetime(2024, 5, 17, 8, 30, 15, tzinfo=timezone(timedelta(hours=-5)))),
        ('  2024-05-17  ', datetime(2024, 5, 17, tzinfo=timezone.utc)),
    ])
    def test_valid(self, value, expected):
        assert parse_lastmod(value) == expected

    @pytest.mark.parametrize('value', [
        None, '', 'yesterday', '2024-13-01', '2024-02-30', '17/05/2024',
        '2024-05-17Z', '2024-05-17T8:30Z',
    ])
    def test_invalid(self, value):
        assert parse_lastmod(value) is None
