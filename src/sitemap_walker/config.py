"""Configuration management for sitemap-walker."""

import os
import json
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from sitemap_walker.models import WalkerConfig, BrowserProfile

ENV_PREFIX = 'SITEMAP_WALKER_'


def _env_flag(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


class Config:
    """Configuration manager for the walker."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration from file or defaults."""
        self.config_path = config_path or self._find_config_file()
        self.walker_config = WalkerConfig()
        self._custom_settings: Dict[str, Any] = {}

        # Load environment variables
        load_dotenv()

        # Load configuration if file exists
        if self.config_path and Path(self.config_path).exists():
            self._load_from_file()

        # Override with environment variables
        self._load_from_env()

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in common locations."""
        search_paths = [
            Path.cwd() / "config.py",
            Path.cwd() / "config.json",
            Path.home() / ".sitemap-walker" / "config.py",
            Path.home() / ".config" / "sitemap-walker" / "config.json",
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        return None

    def _load_from_file(self):
        """Load configuration from file."""
        path = Path(self.config_path)

        if path.suffix == '.py':
            self._load_python_config(path)
        elif path.suffix == '.json':
            self._load_json_config(path)

    def _load_python_config(self, path: Path):
        """Load configuration from Python file."""
        import importlib.util

        spec = importlib.util.spec_from_file_location("sitemap_walker_config", path)
        if spec and spec.loader:
            config_module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(config_module)

            if hasattr(config_module, 'WALKER_CONFIG'):
                self.walker_config = WalkerConfig(**config_module.WALKER_CONFIG)

            if hasattr(config_module, 'CUSTOM'):
                self._custom_settings = dict(config_module.CUSTOM)

    def _load_json_config(self, path: Path):
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)

        if 'walker' in data:
            self.walker_config = WalkerConfig(**data['walker'])

        if 'custom' in data:
            self._custom_settings = data['custom']

    def _load_from_env(self):
        """Override configuration with environment variables."""
        if timeout := os.getenv(f'{ENV_PREFIX}TIMEOUT'):
            self.walker_config.timeout = float(timeout)

        if max_items := os.getenv(f'{ENV_PREFIX}MAX_ITEMS'):
            self.walker_config.max_items = int(max_items)

        if ignore_robots := os.getenv(f'{ENV_PREFIX}IGNORE_ROBOTS'):
            self.walker_config.ignore_robots = _env_flag(ignore_robots)

        if skip_non_200 := os.getenv(f'{ENV_PREFIX}SKIP_NON_200'):
            self.walker_config.skip_non_200 = _env_flag(skip_non_200)

        if user_agent := os.getenv(f'{ENV_PREFIX}USER_AGENT'):
            self.walker_config.user_agent = user_agent

        if verify_ssl := os.getenv(f'{ENV_PREFIX}VERIFY_SSL'):
            self.walker_config.verify_ssl = _env_flag(verify_ssl)

        # Browser profile
        if browser := os.getenv(f'{ENV_PREFIX}BROWSER'):
            try:
                self.walker_config.browser_profile = BrowserProfile[browser.upper()]
            except KeyError:
                pass

        # Comma-separated pattern lists
        if include := os.getenv(f'{ENV_PREFIX}INCLUDE'):
            self.walker_config.include = include

        if exclude := os.getenv(f'{ENV_PREFIX}EXCLUDE'):
            self.walker_config.exclude = exclude

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key."""
        # Check custom settings first
        if key in self._custom_settings:
            return self._custom_settings[key]

        if key in WalkerConfig.model_fields:
            return getattr(self.walker_config, key)

        return default

    def set(self, key: str, value: Any):
        """Set configuration value."""
        if key in WalkerConfig.model_fields:
            setattr(self.walker_config, key, value)
        else:
            # Store in custom settings
            self._custom_settings[key] = value

    def update(self, data: Dict[str, Any]):
        """Update configuration from dictionary."""
        if 'walker' in data:
            for key, value in data['walker'].items():
                if key in WalkerConfig.model_fields:
                    setattr(self.walker_config, key, value)

        if 'custom' in data:
            self._custom_settings.update(data['custom'])

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'walker': self.walker_config.model_dump(mode='json'),
            'custom': self._custom_settings
        }

    def save(self, path: Optional[str] = None):
        """Save configuration to file."""
        save_path = Path(path or self.config_path or './config.json')

        if save_path.suffix == '.py':
            self._save_python_config(save_path)
        else:
            self._save_json_config(save_path)

    def _save_python_config(self, path: Path):
        """Save configuration as Python file."""
        config_str = '''"""Configuration file for sitemap-walker."""

# Walker configuration
WALKER_CONFIG = {
'''
        for key, value in self.walker_config.model_dump(mode='json').items():
            config_str += f"    {key!r}: {value!r},\n"

        config_str += '''}

# Custom settings
CUSTOM = {
'''
        for key, value in self._custom_settings.items():
            config_str += f"    {key!r}: {value!r},\n"

        config_str += '}\n'

        with open(path, 'w') as f:
            f.write(config_str)

    def _save_json_config(self, path: Path):
        """Save configuration as JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file or create default."""
    return Config(config_path)


def create_default_config(path: str = './config.py'):
    """Create a default configuration file."""
    config = Config()

    # Set some sensible defaults
    config.walker_config.timeout = 30.0
    config.walker_config.max_items = 0
    config.walker_config.skip_non_200 = False
    config.walker_config.ignore_robots = False

    # Save the configuration
    config.save(path)
