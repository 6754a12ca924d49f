"""Data models for sitemap-walker."""

from enum import Enum
from typing import Optional, List, Union
from datetime import datetime
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentKind(str, Enum):
    """Recognised sitemap document shapes."""
    URLSET = "urlset"
    SITEMAP_INDEX = "sitemapindex"


class BrowserProfile(str, Enum):
    """Browser profiles for impersonation."""
    CHROME = "chrome120"
    FIREFOX = "firefox133"
    SAFARI = "safari17_0"
    EDGE = "edge101"


class OutputFormat(str, Enum):
    """Supported CLI output formats."""
    TEXT = "text"
    JSON = "json"
    TABLE = "table"


class SitemapItem(BaseModel):
    """A leaf entry of a URL set."""
    model_config = ConfigDict(frozen=True)

    loc: str
    lastmod: Optional[datetime] = None
    changefreq: Optional[str] = None
    priority: Optional[float] = None
    # URL of the nested sitemap the item came from, when reached via an index
    sitemap: Optional[str] = None


class SitemapReference(BaseModel):
    """A child sitemap listed in a sitemap index."""
    model_config = ConfigDict(frozen=True)

    loc: str
    lastmod: Optional[datetime] = None


class UrlSetDocument(BaseModel):
    """Decoded <urlset> document."""
    kind: DocumentKind = DocumentKind.URLSET
    url: str
    items: List[SitemapItem] = Field(default_factory=list)


class SitemapIndexDocument(BaseModel):
    """Decoded <sitemapindex> document."""
    kind: DocumentKind = DocumentKind.SITEMAP_INDEX
    url: str
    sitemaps: List[SitemapReference] = Field(default_factory=list)


SitemapDocument = Union[UrlSetDocument, SitemapIndexDocument]


class WalkerConfig(BaseModel):
    """Configuration for a sitemap walker."""
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    ignore_robots: bool = False
    include: List[str] = Field(default_factory=list)  # regular expressions
    exclude: List[str] = Field(default_factory=list)
    max_items: int = Field(default=0, ge=0)  # 0 means unbounded
    timeout: float = Field(default=30.0, gt=0)  # seconds, per request
    skip_non_200: bool = False
    user_agent: str = "*"
    browser_profile: BrowserProfile = BrowserProfile.CHROME.value
    verify_ssl: bool = True
    max_depth: int = Field(default=32, ge=1)

    @field_validator('include', 'exclude', mode='before')
    @classmethod
    def _split_patterns(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(',') if part.strip()]
        return value

    @field_validator('include', 'exclude')
    @classmethod
    def _check_patterns(cls, value):
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regular expression {pattern!r}: {e}") from e
        return value
