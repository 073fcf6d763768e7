"""
Utility functions and helpers for spotterm
Common functions for time formatting, string handling and token generation
"""

import secrets
import string
from typing import Union, Tuple
from urllib.parse import urlparse


# Alphabet for anti-forgery state tokens
STATE_ALPHABET = string.ascii_letters + string.digits
STATE_LENGTH = 16


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def format_time(milliseconds: int) -> str:
    """
    Format a millisecond position as m:ss

    Args:
        milliseconds: Playback position or duration in milliseconds

    Returns:
        Formatted string, e.g. 215000 -> "3:35"
    """
    total_seconds = max(0, int(milliseconds)) // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated string
    """
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    if max_length <= len(suffix):
        return text[:max_length]
    return text[:max_length - len(suffix)] + suffix


def generate_state(length: int = STATE_LENGTH) -> str:
    """
    Generate a fresh anti-forgery state token for one authorization attempt

    Args:
        length: Number of characters to generate

    Returns:
        Random alphanumeric string drawn from a CSPRNG
    """
    return ''.join(secrets.choice(STATE_ALPHABET) for _ in range(length))


def split_redirect_uri(redirect_uri: str) -> Tuple[str, int, str]:
    """
    Split a redirect URI into the pieces the callback listener binds to

    Args:
        redirect_uri: e.g. "http://127.0.0.1:8888/callback"

    Returns:
        Tuple of (host, port, path)

    Raises:
        ValueError: If the URI has no host or is not http(s)
    """
    parsed = urlparse(redirect_uri)
    if parsed.scheme not in ('http', 'https') or not parsed.hostname:
        raise ValueError(f"Invalid redirect URI: {redirect_uri}")

    port = parsed.port
    if port is None:
        port = 443 if parsed.scheme == 'https' else 80

    return parsed.hostname, port, parsed.path or '/'
