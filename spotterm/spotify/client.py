"""
Spotify API client for playback status and playback control

This module wraps a bearer access token and exposes the handful of Web API
calls the interactive session needs:

- current_playback(): GET /me/player, "204 No Content" becomes an empty snapshot
- skip_track(): POST /me/player/next or /me/player/previous
- get_user_playlists(): GET /me/playlists, paged with a limit parameter
- play_playlist(): PUT /me/player/play with a playlist context
- fetch_image(): download cover art bytes

Player commands go through spotipy. Reads go through the requests session
directly: spotipy turns an undecodable body into None, which cannot be told
apart from "204 No Content". Every request uses a bounded timeout so a
stalled call cannot wedge the input loop.

Error Handling Strategy:

- Non-success HTTP status from the API: RemoteApiError carrying the status
- Connection failures, timeouts, undecodable bodies: TransportError

No retry policy is applied here. spotipy's own retries are switched off;
the session controller decides what to do with a failure (it keeps the
previous state and tries again on the next tick).
"""

from typing import Any, Callable, Dict, List, Optional

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from .models import PlaybackSnapshot, Playlist, SkipDirection
from ..exceptions import RemoteApiError, TransportError
from ..utils.logger import get_logger


API_BASE_URL = "https://api.spotify.com/v1/"


def _error_message(response: requests.Response) -> str:
    """Pull the message out of a Web API error body"""
    try:
        error = response.json().get('error') or {}
        return error.get('message') or response.reason or ""
    except (ValueError, AttributeError):
        return response.text or response.reason or ""


class SpotifyClient:
    """
    Thin Spotify Web API client bound to one access token

    Attributes:
        request_timeout: Seconds before an API or image request is abandoned
        playlist_page_size: Page size used when listing playlists
    """

    def __init__(
        self,
        access_token: str,
        request_timeout: float = 10,
        playlist_page_size: int = 50,
        spotify: Optional[spotipy.Spotify] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client

        Args:
            access_token: Bearer token from SpotifyAuth
            request_timeout: Timeout for every request in seconds
            playlist_page_size: Page size for GET /me/playlists (max 50)
            spotify: Preconfigured spotipy client, mainly for tests
            session: requests session shared by spotipy, reads and image downloads
        """
        self.logger = get_logger(__name__)
        self.request_timeout = request_timeout
        self.playlist_page_size = max(1, min(50, playlist_page_size))
        self._access_token = access_token
        self._session = session or requests.Session()
        self._spotify = spotify or spotipy.Spotify(
            auth=access_token,
            requests_session=self._session,
            requests_timeout=request_timeout,
            retries=0,
            status_retries=0,
        )

    def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run one spotipy call and translate failures into spotterm errors

        Args:
            operation: Short description used in error messages
            func: spotipy method to call
            *args: Positional arguments for the method
            **kwargs: Keyword arguments for the method

        Returns:
            Parsed response from spotipy

        Raises:
            RemoteApiError: For non-success HTTP responses
            TransportError: For connection and timeout failures
        """
        try:
            return func(*args, **kwargs)
        except SpotifyException as e:
            raise RemoteApiError(
                f"Failed to {operation}: {e.http_status} {e.msg}",
                status=e.http_status,
                details={'operation': operation, 'reason': getattr(e, 'reason', None)}
            )
        except requests.RequestException as e:
            raise TransportError(
                f"Failed to {operation}: {e}",
                details={'operation': operation, 'original_error': str(e)}
            )

    def _get_json(self, operation: str, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        GET an API resource and decode its JSON body

        Args:
            operation: Short description used in error messages
            url: Path below the API base, or an absolute "next" link
            params: Query parameters

        Returns:
            Decoded object, None for "204 No Content"

        Raises:
            RemoteApiError: For non-success HTTP responses
            TransportError: For connection failures, timeouts and bodies that
                are not a JSON object
        """
        if not url.startswith("http"):
            url = API_BASE_URL + url

        try:
            response = self._session.get(
                url,
                params=params,
                headers={'Authorization': f'Bearer {self._access_token}'},
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            raise TransportError(
                f"Failed to {operation}: {e}",
                details={'operation': operation, 'original_error': str(e)}
            )

        if response.status_code == 204:
            return None
        if not 200 <= response.status_code < 300:
            raise RemoteApiError(
                f"Failed to {operation}: {response.status_code} {_error_message(response)}",
                status=response.status_code,
                details={'operation': operation, 'url': url}
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Failed to {operation}: could not decode response ({e})",
                details={'operation': operation, 'url': url}
            )
        if not isinstance(data, dict):
            raise TransportError(
                f"Failed to {operation}: unexpected response shape",
                details={'operation': operation, 'url': url}
            )
        return data

    def current_playback(self) -> PlaybackSnapshot:
        """
        Fetch the current player state

        Returns:
            Snapshot of the player; an empty snapshot when nothing is playing

        Raises:
            RemoteApiError, TransportError
        """
        data = self._get_json("fetch player info", "me/player", params={'additional_types': 'episode'})
        return PlaybackSnapshot.from_spotify_data(data)

    def skip_track(self, direction: SkipDirection) -> None:
        """
        Skip to the next or previous item

        Args:
            direction: SkipDirection.NEXT or SkipDirection.PREVIOUS

        Raises:
            RemoteApiError, TransportError
        """
        if direction is SkipDirection.NEXT:
            self._call("skip track", self._spotify.next_track)
        else:
            self._call("skip track", self._spotify.previous_track)
        self.logger.debug(f"Skipped {direction.value}")

    def get_user_playlists(self, limit: Optional[int] = None) -> List[Playlist]:
        """
        List the current user's playlists

        Follows the "next" links until every page has been read.

        Args:
            limit: Page size (1-50), defaults to playlist_page_size

        Returns:
            Playlists in the order Spotify returns them

        Raises:
            RemoteApiError, TransportError
        """
        page_size = max(1, min(50, limit)) if limit else self.playlist_page_size
        playlists: List[Playlist] = []
        page = self._get_json("list playlists", "me/playlists", params={'limit': page_size})

        while page:
            for item in page.get('items') or []:
                # Unavailable playlists show up as null entries
                if isinstance(item, dict) and item.get('id'):
                    playlists.append(Playlist.from_spotify_data(item))
            if not page.get('next'):
                break
            page = self._get_json("list playlists", page['next'])

        self.logger.debug(f"Fetched {len(playlists)} playlists")
        return playlists

    def play_playlist(self, playlist: Playlist) -> None:
        """
        Start playback of a playlist on the active device

        Args:
            playlist: Playlist to use as the playback context

        Raises:
            RemoteApiError, TransportError
        """
        self._call("start playback", self._spotify.start_playback, context_uri=playlist.uri)
        self.logger.debug(f"Started playlist {playlist.id}")

    def fetch_image(self, url: str) -> bytes:
        """
        Download a binary image resource

        Args:
            url: Image URL from the API

        Returns:
            Raw image bytes

        Raises:
            RemoteApiError, TransportError
        """
        try:
            response = self._session.get(url, timeout=self.request_timeout)
        except requests.RequestException as e:
            raise TransportError(f"Failed to fetch image: {e}", details={'url': url})

        if not 200 <= response.status_code < 300:
            raise RemoteApiError(
                f"Failed to fetch image: {response.status_code}",
                status=response.status_code,
                details={'url': url}
            )
        return response.content

    def close(self) -> None:
        """Close the underlying HTTP session"""
        self._session.close()
