"""Parser for robots.txt files to ensure crawler compliance."""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple
from urllib.parse import urlparse, quote, unquote
import re
import logging

from sitemap_walker.crawler.fetcher import Fetcher
from sitemap_walker.errors import TransportError, WalkCancelled


def origin_of(url: str) -> str:
    """Return scheme://host[:port] for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def robots_url_for(url: str) -> str:
    """Get robots.txt URL for given URL."""
    return f"{origin_of(url)}/robots.txt"


# Reserved characters keep their literal form; %2F stays encoded
PATH_SAFE = "/:@!$&'()*+,;=?"
ENCODED_SLASH = re.compile('%2f', re.IGNORECASE)


def normalize_path(path: str) -> str:
    """
    Bring a URL path or rule path to one canonical percent-encoding.

    ``/a b``, ``/a%20b`` and ``/caf%c3%a9`` all compare equal to their
    counterparts once normalized.
    """
    return '%2F'.join(
        quote(unquote(part), safe=PATH_SAFE)
        for part in ENCODED_SLASH.split(path)
    )


@dataclass
class RobotsRule:
    """A single Allow or Disallow line."""
    path: str
    allow: bool
    pattern: re.Pattern = field(init=False, repr=False)

    def __post_init__(self):
        self.path = normalize_path(self.path)
        anchored = self.path.endswith('$')
        body = self.path[:-1] if anchored else self.path
        regex = '.*'.join(re.escape(part) for part in body.split('*'))
        self.pattern = re.compile(regex + ('$' if anchored else ''))

    def matches(self, path: str) -> bool:
        return self.pattern.match(path) is not None


@dataclass
class RobotsRules:
    """Parsed robots.txt rule groups by user agent."""
    groups: Dict[str, List[RobotsRule]] = field(default_factory=dict)

    @classmethod
    def parse(cls, robots_text: str) -> 'RobotsRules':
        """Parse robots.txt content."""
        rules = cls()
        current_agents: List[str] = []
        in_rules = False

        for line in robots_text.splitlines():
            line = line.split('#', 1)[0].strip()

            # Skip comments and empty lines
            if not line or ':' not in line:
                continue

            directive, value = line.split(':', 1)
            directive = directive.strip().lower()
            value = value.strip()

            if directive == 'user-agent':
                # A user-agent after rules starts a new group
                if in_rules:
                    current_agents = []
                    in_rules = False
                agent = value.lower()
                current_agents.append(agent)
                rules.groups.setdefault(agent, [])

            elif directive in ('allow', 'disallow'):
                in_rules = True
                # An empty Disallow allows everything
                if not value:
                    continue
                for agent in current_agents:
                    rules.groups[agent].append(RobotsRule(value, directive == 'allow'))

        return rules

    def _group_for(self, user_agent: str) -> List[RobotsRule]:
        agent = user_agent.lower()
        if agent in self.groups:
            return self.groups[agent]
        return self.groups.get('*', [])

    def can_fetch(self, url: str, user_agent: str = '*') -> bool:
        """
        Check whether a URL may be fetched.

        The longest matching rule wins; on a tie Allow wins.
        """
        parsed = urlparse(url)
        path = parsed.path or '/'
        if parsed.query:
            path += '?' + parsed.query
        path = normalize_path(path)

        if path == '/robots.txt':
            return True

        best: Optional[Tuple[int, bool]] = None
        for rule in self._group_for(user_agent):
            if not rule.matches(path):
                continue
            candidate = (len(rule.path), rule.allow)
            if best is None or candidate > best:
                best = candidate

        return best is None or best[1]


class PermissionGate:
    """Per-walk cache of robots.txt verdicts, keyed by origin."""

    def __init__(self, fetcher: Fetcher, user_agent: str = '*',
                 cancel_check=None):
        """
        Initialize permission gate.

        Args:
            fetcher: Fetcher used for robots.txt requests
            user_agent: Agent whose rule group is evaluated
            cancel_check: Callable raising WalkCancelled when the walk stops
        """
        self.fetcher = fetcher
        self.user_agent = user_agent
        self.cancel_check = cancel_check
        self.robots_cache: Dict[str, Optional[RobotsRules]] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def fetch_robots(self, url: str) -> Optional[RobotsRules]:
        """
        Fetch and parse robots.txt for the URL's origin.

        Returns:
            RobotsRules, or None when there is no usable robots.txt
        """
        origin = origin_of(url)

        # Check cache
        if origin in self.robots_cache:
            return self.robots_cache[origin]

        robots_url = robots_url_for(url)
        if self.cancel_check:
            self.cancel_check(robots_url)

        rules = None
        try:
            result = self.fetcher.fetch(robots_url)
            if result.ok:
                rules = RobotsRules.parse(result.content.decode('utf-8', errors='replace'))
            else:
                # No robots.txt means everything is allowed
                self.logger.info(f"No robots.txt found for {origin} (status {result.status_code})")
        except WalkCancelled:
            raise
        except TransportError as e:
            self.logger.warning(f"Failed to fetch robots.txt from {robots_url}: {e}")

        self.robots_cache[origin] = rules
        return rules

    def allowed(self, url: str) -> bool:
        """Check if URL can be fetched according to robots.txt."""
        rules = self.fetch_robots(url)
        if rules is None:
            return True
        return rules.can_fetch(url, self.user_agent)

