"""
Session state owned by the session controller

Only the controller's own handlers mutate a SessionState, and only from the
run loop, so no locking is involved.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..spotify.models import PlaybackSnapshot, Playlist


class PageKind(Enum):
    """
    Pages of the interactive session

    State Transitions:
    PLAYLIST_LIST --enter--> NOW_PLAYING
    NOW_PLAYING --esc/p--> PLAYLIST_LIST
    either --q--> exit
    """
    PLAYLIST_LIST = "playlist_list"
    NOW_PLAYING = "now_playing"


@dataclass
class SessionState:
    """
    Everything the renderer needs to draw one frame

    Attributes:
        current_page: Page receiving key presses
        selection_index: Highlighted row on the playlist page
        snapshot: Last successfully fetched player state
        playlists: User playlists loaded at startup
        cover_art: Pre-rendered cover art lines for the current track
        exit: Set by 'q'; the run loop stops after the current iteration
    """
    current_page: PageKind = PageKind.PLAYLIST_LIST
    selection_index: int = 0
    snapshot: PlaybackSnapshot = field(default_factory=PlaybackSnapshot.empty)
    playlists: List[Playlist] = field(default_factory=list)
    cover_art: List[str] = field(default_factory=list)
    exit: bool = False

    def selected_playlist(self) -> Optional[Playlist]:
        if 0 <= self.selection_index < len(self.playlists):
            return self.playlists[self.selection_index]
        return None
