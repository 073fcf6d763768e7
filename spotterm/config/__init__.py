"""
Configuration management package for spotterm

This package holds everything spotterm needs before the interactive session
can start:

1. Settings Management (settings.py):
   - Application configuration from YAML files and environment variables
   - Settings validation
   - No global instance: load_settings() returns a Settings object that the
     CLI passes on explicitly

2. Credential Storage (token_store.py):
   - CredentialRecord with the field-by-field refresh merge rule
   - Atomic JSON persistence of the single credential record

3. Authentication Management (auth.py):
   - Spotify OAuth2 authorization code flow with a one-shot local listener
   - Refresh with fallback to full authorization
   - Anti-forgery state verification

Usage:

    from spotterm.config import load_settings, SpotifyAuth

    settings = load_settings()
    token = SpotifyAuth.from_settings(settings).get_valid_token()
"""

from .settings import load_settings, Settings
from .token_store import CredentialRecord, TokenStore
from .auth import CallbackListener, SpotifyAuth

__all__ = [
    # Settings management
    'load_settings',     # Build settings from files and environment
    'Settings',          # Settings class for direct instantiation

    # Credential storage
    'CredentialRecord',  # Persisted credential with refresh merge rule
    'TokenStore',        # Atomic JSON storage for the credential record

    # Authentication management
    'CallbackListener',  # One-shot local redirect listener
    'SpotifyAuth'        # Credential lifecycle manager
]
