"""Test Spotify data models"""

import pytest

from spotterm.spotify.models import PlaybackSnapshot, Playlist, Track


class TestSpotifyModels:
    """Test Spotify data models"""

    def test_track_creation(self, sample_track_data):
        """Test Track creation from a player item"""
        track = Track.from_spotify_data(sample_track_data)

        assert track.id == 'test_track_123'
        assert track.name == 'Test Song'
        assert track.artists == ('Test Artist', 'Guest')
        assert track.all_artists == 'Test Artist, Guest'
        assert track.duration_ms == 210000
        # Widest image wins
        assert track.album_art_url == 'https://i.scdn.co/image/large'

    def test_episode_uses_show(self):
        track = Track.from_spotify_data({
            'id': 'ep1',
            'name': 'Episode 12',
            'duration_ms': 1800000,
            'images': [{'url': 'https://i.scdn.co/image/episode', 'width': 300}],
            'show': {'name': 'Some Podcast', 'images': [{'url': 'https://i.scdn.co/image/show', 'width': 640}]},
        })

        assert track.artists == ('Some Podcast',)
        assert track.album_art_url == 'https://i.scdn.co/image/episode'

    def test_track_with_missing_fields(self):
        track = Track.from_spotify_data({'name': None, 'artists': None, 'album': None})

        assert track.name == 'Unknown'
        assert track.artists == ()
        assert track.duration_ms == 0
        assert track.album_art_url is None

    def test_track_identity(self):
        assert Track(name='A', id='1').identity == Track(name='B', id='1').identity
        assert Track(name='A', id='1').identity != Track(name='A', id='2').identity
        # Local files have no id
        assert Track(name='A', artists=('X',)).identity == ('name', 'A', ('X',))

    def test_snapshot_creation(self, sample_playback_data):
        snapshot = PlaybackSnapshot.from_spotify_data(sample_playback_data)

        assert snapshot.is_playing is True
        assert snapshot.progress_ms == 45000
        assert snapshot.track_identity == ('id', 'test_track_123')

    @pytest.mark.parametrize('data', [None, {}])
    def test_empty_snapshot(self, data):
        snapshot = PlaybackSnapshot.from_spotify_data(data)

        assert snapshot == PlaybackSnapshot.empty()
        assert snapshot.is_playing is False
        assert snapshot.current_track is None
        assert snapshot.progress_ms is None
        assert snapshot.track_identity is None

    def test_snapshot_without_item(self):
        """Ads and private sessions report no item"""
        snapshot = PlaybackSnapshot.from_spotify_data({'is_playing': True, 'progress_ms': None, 'item': None})

        assert snapshot.is_playing is True
        assert snapshot.current_track is None
        assert snapshot.progress_ms is None

    def test_playlist_creation(self):
        playlist = Playlist.from_spotify_data({
            'id': 'pl_1',
            'name': 'Morning',
            'uri': 'spotify:playlist:pl_1',
            'tracks': {'total': 42},
            'owner': {'id': 'user_1', 'display_name': 'User One'},
        })

        assert playlist.name == 'Morning'
        assert playlist.total_tracks == 42
        assert playlist.owner == 'User One'

    def test_playlist_defaults(self):
        playlist = Playlist.from_spotify_data({'id': 'pl_2', 'name': None, 'items': {'total': 3}})

        assert playlist.name == 'Untitled'
        assert playlist.uri == 'spotify:playlist:pl_2'
        assert playlist.total_tracks == 3
        assert playlist.owner is None
