"""
Interactive session package

- state.py: PageKind and SessionState
- pages.py: per-page key handling (PlaylistListPage, NowPlayingPage)
- controller.py: SessionController run loop and command dispatch
- cover_art.py: cover art derived from the current track
- terminal.py: curses input and rendering
"""

from .controller import SessionController
from .cover_art import CoverArtCache
from .state import PageKind, SessionState

__all__ = [
    'SessionController',
    'CoverArtCache',
    'PageKind',
    'SessionState',
]
