"""
Spotify integration package

1. Client Module (client.py):
   - SpotifyClient: typed wrappers over the playback endpoints used by the session
   - Errors surface as RemoteApiError (status) or TransportError

2. Models Module (models.py):
   - PlaybackSnapshot, Track: player state replaced wholesale on every poll
   - Playlist: playback context for the playlist page
   - SkipDirection: next/previous
"""

from .client import SpotifyClient
from .models import PlaybackSnapshot, Playlist, SkipDirection, Track

__all__ = [
    'SpotifyClient',
    'PlaybackSnapshot',
    'Playlist',
    'SkipDirection',
    'Track',
]
