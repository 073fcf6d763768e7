"""
SpotTerm: drive Spotify playback from the terminal

SpotTerm signs in to a Spotify account once (browser authorization with a
local redirect listener), keeps the credential on disk and refreshes it on
every start. It then runs a full-screen curses session with two pages:

- Playlists: the user's playlists; Enter starts the highlighted one
- Now Playing: current track, artists, progress and an ASCII rendering of
  the cover; left/right skip tracks

Package layout:

- ``config/``: settings, credential storage and the authorization manager
- ``spotify/``: Web API client and data models
- ``session/``: session state, pages, run loop and curses front end
- ``utils/``: logging and formatting helpers
"""

__version__ = "0.3.0"

__author__ = "SpotTerm Team"

__description__ = "Spotify remote control for the terminal"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
