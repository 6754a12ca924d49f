"""HTTP fetching of sitemap and robots.txt resources."""

from dataclasses import dataclass
from typing import Optional, Any
import logging

from curl_cffi import requests
from curl_cffi.requests.exceptions import RequestException, Timeout

from sitemap_walker.errors import TransportError, FetchTimeout
from sitemap_walker.models import WalkerConfig


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single GET that reached the server."""
    url: str
    status_code: int
    content: bytes
    content_type: str = ''
    content_encoding: str = ''

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class Fetcher:
    """Issues one GET per resource with a per-request timeout."""

    def __init__(self, config: Optional[WalkerConfig] = None, session: Optional[Any] = None):
        """
        Initialize fetcher.

        Args:
            config: Walker configuration (timeout, impersonation, SSL)
            session: Client override exposing ``get(url, timeout=...)``;
                a curl_cffi session is created when omitted
        """
        self.config = config or WalkerConfig()
        self._owns_session = session is None
        self.session = session or self._create_session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_session(self) -> requests.Session:
        """Create a new HTTP session with proper configuration."""
        return requests.Session(
            impersonate=self.config.browser_profile,
            verify=self.config.verify_ssl
        )

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetch a resource.

        Non-200 statuses are returned, not raised.

        Raises:
            FetchTimeout: the request did not complete within ``timeout``
            TransportError: any other failure to get a response
        """
        timeout = timeout if timeout is not None else self.config.timeout
        self.logger.debug(f"GET {url} (timeout {timeout}s)")

        try:
            response = self.session.get(url, timeout=timeout)
        except Timeout as e:
            raise FetchTimeout(url, f"Timed out after {timeout}s fetching {url}") from e
        except RequestException as e:
            raise TransportError(url, f"Failed to fetch {url}: {e}") from e
        except Exception as e:
            # Client overrides raise their own exception types
            raise TransportError(url, f"Failed to fetch {url}: {e}") from e

        headers = response.headers or {}
        return FetchResult(
            url=url,
            status_code=response.status_code,
            content=response.content or b'',
            content_type=headers.get('content-type', '') or '',
            content_encoding=headers.get('content-encoding', '') or ''
        )

    def close(self):
        """Close the session if this fetcher created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
