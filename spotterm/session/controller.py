"""
Interactive session controller

The controller is a single-threaded state machine. Each iteration of the
run loop:

1. renders the current state
2. waits a bounded time for at most one key press and dispatches it to the
   current page
3. refreshes the playback snapshot when the refresh interval has elapsed

Failures of remote calls inside the loop are logged and discarded: the
previous snapshot stays on screen and the next tick tries again. A skip
command that succeeds re-fetches the snapshot immediately and restarts the
refresh timer, so the timer-driven fetch for that tick is superseded.

The exit flag is the only cancellation primitive. A network call already
in flight when 'q' is pressed is allowed to finish; the loop then stops.
"""

import time
from typing import Callable, Optional, Protocol

from .cover_art import CoverArtCache
from .pages import PAGES
from .state import PageKind, SessionState
from ..exceptions import RemoteApiError, TransportError
from ..spotify.client import SpotifyClient
from ..spotify.models import SkipDirection
from ..utils.logger import get_logger


# Errors that must never end the interactive session
RECOVERABLE_ERRORS = (TransportError, RemoteApiError)


class Renderer(Protocol):
    def render(self, state: SessionState) -> None: ...


class InputSource(Protocol):
    def poll(self) -> Optional[str]: ...


class SessionController:
    """
    Owns the session state and drives the run loop

    Attributes:
        state: Current SessionState
        refresh_interval: Seconds between timer-driven playback refreshes
    """

    def __init__(
        self,
        client: SpotifyClient,
        renderer: Renderer,
        input_source: InputSource,
        cover_art: Optional[CoverArtCache] = None,
        refresh_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.logger = get_logger(__name__)
        self.client = client
        self.renderer = renderer
        self.input_source = input_source
        self.cover_art = cover_art
        self.refresh_interval = refresh_interval
        self._clock = clock
        self._last_refresh = clock()
        self.state = SessionState()

    # Lifecycle

    def load_initial_state(self) -> None:
        """
        Load playlists and the first playback snapshot

        Neither failure is fatal: an empty playlist page and an empty
        player are both valid starting points.
        """
        try:
            self.state.playlists = self.client.get_user_playlists()
        except RECOVERABLE_ERRORS as e:
            self.logger.warning(f"Could not load playlists: {e}")
            self.state.playlists = []
        self.state.selection_index = 0
        self.refresh_playback()

    def run(self) -> None:
        """Run iterations until the exit flag is set"""
        self.logger.info("Session started")
        while not self.state.exit:
            self.run_once()
        self.logger.info("Session finished")

    def run_once(self) -> None:
        """Execute one loop iteration"""
        self.renderer.render(self.state)

        key = self.input_source.poll()
        if key is not None:
            self.handle_key(key)

        if self.state.exit:
            return

        if self._clock() - self._last_refresh >= self.refresh_interval:
            self.refresh_playback()

    # Input dispatch

    def handle_key(self, key: str) -> None:
        PAGES[self.state.current_page].handle_key(key, self)

    def request_exit(self) -> None:
        self.logger.debug("Exit requested")
        self.state.exit = True

    def show_page(self, page: PageKind) -> None:
        if page is not self.state.current_page:
            self.logger.debug(f"Page {self.state.current_page.value} -> {page.value}")
        self.state.current_page = page

    def move_selection(self, delta: int) -> None:
        """Move the playlist highlight, clamped to the list bounds"""
        if not self.state.playlists:
            self.state.selection_index = 0
            return
        last = len(self.state.playlists) - 1
        self.state.selection_index = max(0, min(last, self.state.selection_index + delta))

    def play_selected_playlist(self) -> None:
        """
        Start the highlighted playlist and switch to the now-playing page

        A failed play command is logged; the page still changes. With no
        playlists this does nothing.
        """
        playlist = self.state.selected_playlist()
        if playlist is None:
            return

        try:
            self.client.play_playlist(playlist)
        except RECOVERABLE_ERRORS as e:
            self.logger.warning(f"Could not start playlist '{playlist.name}': {e}")

        self.show_page(PageKind.NOW_PLAYING)

    def skip(self, direction: SkipDirection) -> None:
        """
        Skip and immediately refresh the snapshot

        On failure nothing changes: same page, same snapshot.
        """
        try:
            self.client.skip_track(direction)
        except RECOVERABLE_ERRORS as e:
            self.logger.warning(f"Could not skip {direction.value}: {e}")
            return
        self.refresh_playback()

    # Remote refresh

    def refresh_playback(self) -> bool:
        """
        Fetch the player state and replace the cached snapshot

        The timer restarts whether or not the fetch succeeds, so a failing
        endpoint is retried once per interval rather than every iteration.

        Returns:
            True if the snapshot was replaced, False if the old one was kept
        """
        self._last_refresh = self._clock()
        try:
            snapshot = self.client.current_playback()
        except RECOVERABLE_ERRORS as e:
            self.logger.warning(f"Playback refresh failed, keeping previous state: {e}")
            return False

        previous = self.state.snapshot
        self.state.snapshot = snapshot

        if snapshot.track_identity != previous.track_identity:
            track = snapshot.current_track
            self.logger.info(f"Track changed: {track.name if track else 'nothing playing'}")
            if self.cover_art is not None:
                self.state.cover_art = self.cover_art.update(track)
        return True
