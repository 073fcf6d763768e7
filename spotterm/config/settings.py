"""
Configuration management for spotterm

Settings come from three layers: dataclass defaults, one YAML file and
the environment (a .env file is loaded first).

Sections (one dataclass each):
- Spotify API settings (credentials, redirect URI, scopes, endpoints)
- Interactive session behavior (refresh interval, input polling, cover art)
- Network timeouts for API calls and the authorization listener
- Logging output
- Credential storage location

There is no module-level settings instance: the CLI builds one with
load_settings() and passes it to the components that need it.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

from ..exceptions import ConfigError
from ..utils.helpers import split_redirect_uri

# Pick up SPOTIFY_CLIENT_ID and friends from a .env file
load_dotenv()


DEFAULT_SCOPES = [
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "playlist-read-private",
    "playlist-read-collaborative",
]


TRUE_STRINGS = {'true', 'yes', 'on', '1'}
FALSE_STRINGS = {'false', 'no', 'off', '0'}


def _coerce_value(name: str, value: Any, current: Any) -> Any:
    """
    Convert a YAML value to the type of the setting it replaces

    Quoted numbers and booleans are accepted. Scopes may be a list or a
    space-separated string.

    Raises:
        ConfigError: If the value cannot be converted
    """
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
            return value.strip().lower() in TRUE_STRINGS
    elif isinstance(current, (int, float)):
        if not isinstance(value, bool):
            try:
                return type(current)(value)
            except (TypeError, ValueError):
                pass
    elif isinstance(current, list):
        if isinstance(value, str):
            return value.split()
        if isinstance(value, list):
            return [str(item) for item in value]
    elif value is None:
        return ""
    elif isinstance(value, (str, int, float)):
        return str(value)

    raise ConfigError(
        f"Invalid value for {name}: {value!r} (expected {type(current).__name__})",
        details={'setting': name, 'value': repr(value)}
    )


@dataclass
class SpotifyConfig:
    """
    Spotify application registration and OAuth2 endpoints

    client_id and client_secret normally come from SPOTIFY_CLIENT_ID and
    SPOTIFY_CLIENT_SECRET rather than from the YAML file.
    """
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://127.0.0.1:8888/callback"
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))
    authorize_url: str = "https://accounts.spotify.com/authorize"
    token_url: str = "https://accounts.spotify.com/api/token"


@dataclass
class SessionConfig:
    """
    Interactive session behavior

    refresh_interval is the minimum number of seconds between two
    timer-driven playback refreshes; input_timeout_ms bounds how long a
    single loop iteration waits for a key press.
    """
    refresh_interval: float = 1.0
    input_timeout_ms: int = 100
    playlist_page_size: int = 50
    show_cover_art: bool = True
    cover_art_width: int = 24


@dataclass
class NetworkConfig:
    """
    Network timeouts

    request_timeout applies to every outbound HTTP call so a stalled request
    cannot wedge the input loop. callback_timeout bounds the wait for the
    browser redirect during authorization.
    """
    request_timeout: int = 10
    callback_timeout: int = 300


@dataclass
class LoggingConfig:
    """
    Log destinations

    A relative file name is placed in the config directory.
    """
    level: str = "INFO"
    file: str = "spotterm.log"
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class SecurityConfig:
    """Where the credential record and config directory live"""
    token_storage_path: str = "~/.spotterm/spotify_token.json"
    config_directory: str = "~/.spotterm/"


class Settings:
    """
    Resolved spotterm configuration

    Values come from the dataclass defaults, then one YAML file, then the
    environment. Each section is available as an attribute.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Explicit YAML file; None searches the default locations
        """
        self.config_path = config_path

        self.spotify = SpotifyConfig()
        self.session = SessionConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()
        self.security = SecurityConfig()

        self._load_config()
        self._apply_environment()

    def _sections(self) -> Dict[str, Any]:
        return {
            'spotify': self.spotify,
            'session': self.session,
            'network': self.network,
            'logging': self.logging,
            'security': self.security,
        }

    def _load_config(self) -> None:
        """
        Read the YAML configuration

        Without an explicit path, the first existing file among
        ~/.spotterm/config.yaml and ./config.yaml is used. A file that cannot be parsed is an error.

        Raises:
            ConfigError: If an explicit config file is missing, or the chosen
                         file is not a valid YAML mapping
        """
        if self.config_path:
            path = Path(self.config_path).expanduser()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}", details={'file_path': str(path)})
            self._apply_config(self._read_yaml(path))
            return

        config_paths = [
            Path(self.security.config_directory).expanduser() / "config.yaml",
            Path("config.yaml"),
        ]

        for path in config_paths:
            if path.exists():
                self._apply_config(self._read_yaml(path))
                break

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}", details={'file_path': str(path)})

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping", details={'file_path': str(path)})
        return data

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Copy known keys from the YAML mapping onto the sections

        Updates only the attributes that exist in both the config file
        and the dataclass definition.

        Args:
            config_data: Parsed YAML, keyed by section name

        Raises:
            ConfigError: If a value does not fit the type of its setting
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        current = getattr(config_obj, key)
                        setattr(config_obj, key, _coerce_value(f"{section_name}.{key}", value, current))

    def _apply_environment(self) -> None:
        """
        Override file values with environment variables

        Environment variables take precedence over file-based configuration.
        Both the SPOTIFY_-prefixed names and the bare CLIENT_ID style names
        are accepted; the prefixed name wins when both are set.
        """
        env_mappings = [
            (('SPOTIFY_CLIENT_ID', 'CLIENT_ID'), lambda v: setattr(self.spotify, 'client_id', v)),
            (('SPOTIFY_CLIENT_SECRET', 'CLIENT_SECRET'), lambda v: setattr(self.spotify, 'client_secret', v)),
            (('SPOTIFY_REDIRECT_URI', 'REDIRECT_URI'), lambda v: setattr(self.spotify, 'redirect_uri', v)),
            (('SPOTTERM_TOKEN_PATH',), lambda v: setattr(self.security, 'token_storage_path', v)),
            (('SPOTTERM_LOG_LEVEL',), lambda v: setattr(self.logging, 'level', v)),
        ]

        for env_vars, setter in env_mappings:
            for env_var in env_vars:
                value = os.getenv(env_var)
                if value:
                    setter(value)
                    break

    def get_config_directory(self) -> Path:
        """
        Config directory with ~ expanded
        """
        return Path(self.security.config_directory).expanduser()

    def get_token_storage_path(self) -> Path:
        """
        Credential file location with ~ expanded
        """
        return Path(self.security.token_storage_path).expanduser()

    def validate(self) -> List[str]:
        """
        Check that the configuration can drive a session

        Returns:
            List of human-readable problems, empty when the configuration is usable
        """
        errors = []

        if not self.spotify.client_id or not self.spotify.client_secret:
            errors.append("Spotify client_id and client_secret are required "
                          "(set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET)")

        try:
            split_redirect_uri(self.spotify.redirect_uri)
        except ValueError as e:
            errors.append(str(e))

        if not self.spotify.scopes:
            errors.append("At least one Spotify scope is required")

        if self.session.refresh_interval <= 0:
            errors.append(f"Invalid refresh interval: {self.session.refresh_interval}")

        if self.session.input_timeout_ms < 0:
            errors.append(f"Invalid input timeout: {self.session.input_timeout_ms}")

        if self.network.request_timeout <= 0:
            errors.append(f"Invalid request timeout: {self.network.request_timeout}")

        return errors

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """
        Serialize settings to a plain dictionary

        Args:
            include_secrets: Keep client_id/client_secret instead of blanking them

        Returns:
            Dictionary keyed by section name
        """
        data = {name: asdict(section) for name, section in self._sections().items()}
        if not include_secrets:
            data['spotify']['client_id'] = "***" if self.spotify.client_id else ""
            data['spotify']['client_secret'] = "***" if self.spotify.client_secret else ""
        return data

    def __str__(self) -> str:
        sections = [
            f"Redirect: {self.spotify.redirect_uri}",
            f"Token file: {self.security.token_storage_path}",
            f"Refresh: {self.session.refresh_interval}s",
        ]
        return f"Settings({', '.join(sections)})"


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Build a settings instance from configuration files and the environment

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance
    """
    return Settings(config_path)
