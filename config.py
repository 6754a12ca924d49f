"""Configuration file for sitemap-walker."""

# Walker configuration
WALKER_CONFIG = {
    'ignore_robots': False,
    'include': [],
    'exclude': [],
    'max_items': 0,
    'timeout': 30.0,
    'skip_non_200': False,
    'user_agent': '*',
    'browser_profile': 'chrome120',
    'verify_ssl': True,
    'max_depth': 32,
}

# Custom settings
CUSTOM = {
}
