"""
Page-specific key handling

Each page is a small object with its own handle_key(). The controller looks
the page up by the current PageKind and hands it the key; the page calls
back into the controller for anything that touches state or the network.

Keys arrive as names produced by the terminal layer: 'up', 'down', 'left',
'right', 'enter', 'esc', or a single printable character.
"""

from abc import ABC, abstractmethod
from typing import Dict, TYPE_CHECKING

from .state import PageKind
from ..spotify.models import SkipDirection

if TYPE_CHECKING:
    from .controller import SessionController


QUIT_KEY = 'q'


class Page(ABC):
    """Base page: 'q' exits from anywhere, everything else is page specific"""

    kind: PageKind
    help_text: str = ""

    def handle_key(self, key: str, controller: "SessionController") -> None:
        if key == QUIT_KEY:
            controller.request_exit()
            return
        self.handle_page_key(key, controller)

    @abstractmethod
    def handle_page_key(self, key: str, controller: "SessionController") -> None:
        """Handle a key that is not global"""


class PlaylistListPage(Page):
    """Playlist selection list"""

    kind = PageKind.PLAYLIST_LIST
    help_text = "↑/k:Up  ↓/j:Down  Enter:Play  q:Quit"

    def handle_page_key(self, key: str, controller: "SessionController") -> None:
        if key in ('up', 'k'):
            controller.move_selection(-1)
        elif key in ('down', 'j'):
            controller.move_selection(1)
        elif key == 'enter':
            controller.play_selected_playlist()


class NowPlayingPage(Page):
    """Current track with progress"""

    kind = PageKind.NOW_PLAYING
    help_text = "←:Prev  →:Next  p/Esc:Playlists  q:Quit"

    def handle_page_key(self, key: str, controller: "SessionController") -> None:
        if key in ('esc', 'p'):
            controller.show_page(PageKind.PLAYLIST_LIST)
        elif key == 'left':
            controller.skip(SkipDirection.PREVIOUS)
        elif key == 'right':
            controller.skip(SkipDirection.NEXT)


PAGES: Dict[PageKind, Page] = {
    page.kind: page for page in (PlaylistListPage(), NowPlayingPage())
}
