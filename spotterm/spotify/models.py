"""
Data models for Spotify playback and playlist information

Plain dataclasses built from Spotify Web API responses through
from_spotify_data() factory methods. Missing or null fields fall back to
empty values instead of raising; the player endpoint omits fields for ads,
podcasts and private sessions.

Models:
- SkipDirection: which way a skip command moves
- Track: the currently playing item (track or podcast episode)
- PlaybackSnapshot: one complete view of the player state
- Playlist: a user playlist that can be started as a playback context

PlaybackSnapshot is frozen. The session replaces it as a whole on every
successful poll so a track and its progress always come from the same response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class SkipDirection(Enum):
    """Direction of a skip command"""
    NEXT = "next"
    PREVIOUS = "previous"


def _largest_image_url(images: Any) -> Optional[str]:
    """Pick the widest image from a Spotify images array"""
    if not isinstance(images, list):
        return None
    candidates = [image for image in images if isinstance(image, dict) and image.get('url')]
    if not candidates:
        return None
    best = max(candidates, key=lambda image: image.get('width') or 0)
    return best['url']


@dataclass(frozen=True)
class Track:
    """
    Currently playing item

    Attributes:
        id: Spotify ID, None for local files
        name: Track or episode title
        artists: Artist names in the order Spotify lists them
        duration_ms: Item length in milliseconds
        album_art_url: URL of the cover image, if any
    """
    name: str
    artists: Tuple[str, ...] = ()
    duration_ms: int = 0
    album_art_url: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> "Track":
        """
        Create a Track from a player "item" object

        Args:
            data: Track or episode object from the API

        Returns:
            Track instance
        """
        artists = tuple(
            artist.get('name', '')
            for artist in data.get('artists') or []
            if isinstance(artist, dict)
        )

        # Episodes have a show instead of artists and their own images
        show = data.get('show') or {}
        if not artists and show.get('name'):
            artists = (show['name'],)

        album = data.get('album') or {}
        album_art_url = (
            _largest_image_url(album.get('images'))
            or _largest_image_url(data.get('images'))
            or _largest_image_url(show.get('images'))
        )

        return cls(
            id=data.get('id'),
            name=data.get('name') or 'Unknown',
            artists=artists,
            duration_ms=int(data.get('duration_ms') or 0),
            album_art_url=album_art_url,
        )

    @property
    def identity(self) -> Tuple[Any, ...]:
        """Value that changes when a different item starts playing"""
        if self.id:
            return ('id', self.id)
        return ('name', self.name, self.artists)

    @property
    def all_artists(self) -> str:
        return ", ".join(self.artists)


@dataclass(frozen=True)
class PlaybackSnapshot:
    """
    Player state at one point in time

    Attributes:
        is_playing: Whether playback is running
        current_track: Item being played, None when nothing is loaded
        progress_ms: Position in the current item, None when unknown
    """
    is_playing: bool = False
    current_track: Optional[Track] = None
    progress_ms: Optional[int] = None

    @classmethod
    def empty(cls) -> "PlaybackSnapshot":
        """Snapshot used when the player reports no active playback"""
        return cls()

    @classmethod
    def from_spotify_data(cls, data: Optional[Dict[str, Any]]) -> "PlaybackSnapshot":
        """
        Create a snapshot from the GET /me/player response

        Args:
            data: Parsed response, None for "204 No Content"

        Returns:
            PlaybackSnapshot instance
        """
        if not data:
            return cls.empty()

        item = data.get('item')
        progress = data.get('progress_ms')
        return cls(
            is_playing=bool(data.get('is_playing', False)),
            current_track=Track.from_spotify_data(item) if isinstance(item, dict) else None,
            progress_ms=int(progress) if progress is not None else None,
        )

    @property
    def track_identity(self) -> Optional[Tuple[Any, ...]]:
        return self.current_track.identity if self.current_track else None


@dataclass
class Playlist:
    """
    User playlist

    Attributes:
        id: Spotify playlist ID
        name: Display name
        uri: Context URI used to start playback
        total_tracks: Number of tracks reported by the API
    """
    id: str
    name: str
    uri: str = ""
    total_tracks: int = 0
    owner: Optional[str] = None

    def __post_init__(self):
        if not self.uri:
            self.uri = f"spotify:playlist:{self.id}"

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> "Playlist":
        """
        Create a Playlist from a simplified playlist object

        Args:
            data: Item of the GET /me/playlists response

        Returns:
            Playlist instance
        """
        # Newer API responses report the track count under "items"
        tracks = data.get('tracks') or data.get('items') or {}
        owner = data.get('owner') or {}
        return cls(
            id=data['id'],
            name=data.get('name') or 'Untitled',
            uri=data.get('uri') or "",
            total_tracks=int(tracks.get('total') or 0) if isinstance(tracks, dict) else 0,
            owner=owner.get('display_name') or owner.get('id'),
        )
