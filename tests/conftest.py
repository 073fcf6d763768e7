"""Test configuration and fixtures"""

import pytest
import tempfile
from io import BytesIO
from pathlib import Path
from unittest.mock import Mock

from PIL import Image

from spotterm.config.token_store import TokenStore
from spotterm.spotify.models import PlaybackSnapshot, Playlist


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def token_store(temp_dir):
    """Token store pointing into the temporary directory"""
    return TokenStore(temp_dir / "spotify_token.json")


@pytest.fixture(autouse=True)
def clean_spotify_env(monkeypatch):
    """Keep the developer's real credentials out of the tests"""
    for name in (
        'SPOTIFY_CLIENT_ID', 'CLIENT_ID', 'SPOTIFY_CLIENT_SECRET', 'CLIENT_SECRET',
        'SPOTIFY_REDIRECT_URI', 'REDIRECT_URI', 'SPOTTERM_TOKEN_PATH', 'SPOTTERM_LOG_LEVEL',
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_track_data():
    """Sample player item for testing"""
    return {
        'id': 'test_track_123',
        'name': 'Test Song',
        'artists': [{'id': 'artist_123', 'name': 'Test Artist'}, {'id': 'artist_456', 'name': 'Guest'}],
        'album': {
            'id': 'album_123',
            'name': 'Test Album',
            'images': [
                {'url': 'https://i.scdn.co/image/small', 'width': 64, 'height': 64},
                {'url': 'https://i.scdn.co/image/large', 'width': 640, 'height': 640},
            ],
        },
        'duration_ms': 210000,  # 3:30
    }


@pytest.fixture
def sample_playback_data(sample_track_data):
    """Sample GET /me/player response"""
    return {
        'is_playing': True,
        'progress_ms': 45000,
        'item': sample_track_data,
        'currently_playing_type': 'track',
    }


@pytest.fixture
def sample_playlists():
    return [
        Playlist(id='pl_1', name='Morning'),
        Playlist(id='pl_2', name='Focus'),
        Playlist(id='pl_3', name='Evening'),
    ]


@pytest.fixture
def png_bytes():
    """Small gradient PNG"""
    image = Image.new('L', (8, 8))
    image.putdata([x * 32 for _ in range(8) for x in range(8)])
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def mock_client():
    """SpotifyClient stand-in with an empty player"""
    client = Mock()
    client.current_playback.return_value = PlaybackSnapshot.empty()
    client.get_user_playlists.return_value = []
    return client
