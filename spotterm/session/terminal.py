"""
curses front end for the interactive session

CursesInput turns raw curses key codes into the key names pages understand
and bounds each wait with stdscr.timeout(). CursesRenderer draws the two
pages from a SessionState. Page content is built as plain lines first
(playlist_page_lines / now_playing_lines) so it can be checked without a
terminal.
"""

import curses
from typing import List, Optional, Tuple

from .pages import PAGES
from .state import PageKind, SessionState
from ..utils.helpers import format_time, truncate_string


KEY_NAMES = {
    curses.KEY_UP: 'up',
    curses.KEY_DOWN: 'down',
    curses.KEY_LEFT: 'left',
    curses.KEY_RIGHT: 'right',
    curses.KEY_ENTER: 'enter',
    10: 'enter',
    13: 'enter',
    27: 'esc',
}

PROGRESS_FILLED, PROGRESS_EMPTY = "━", "╌"

# Color pair ids
C_ACCENT = 1
C_SELECTED = 2


def translate_key(code: int) -> Optional[str]:
    """
    Map a curses key code to a key name

    Args:
        code: Value returned by stdscr.getch(), -1 when nothing was pressed

    Returns:
        'up', 'down', 'left', 'right', 'enter', 'esc', a printable character,
        or None for no key / keys the session does not use
    """
    if code == -1:
        return None
    if code in KEY_NAMES:
        return KEY_NAMES[code]
    if 32 <= code < 127:
        return chr(code)
    return None


def progress_bar(progress_ms: int, duration_ms: int, width: int) -> str:
    """Text gauge for the current position"""
    if width <= 0:
        return ""
    ratio = min(1.0, max(0.0, progress_ms / duration_ms)) if duration_ms > 0 else 0.0
    filled = int(ratio * width)
    return PROGRESS_FILLED * filled + PROGRESS_EMPTY * (width - filled)


def visible_window(selected: int, total: int, rows: int) -> Tuple[int, int]:
    """Range of list rows to draw so the selection stays on screen"""
    if rows <= 0 or total <= 0:
        return 0, 0
    start = max(0, min(selected - rows // 2, total - rows))
    return start, min(total, start + rows)


def playlist_page_lines(state: SessionState, rows: int) -> List[Tuple[str, bool]]:
    """
    Build the rows of the playlist list

    Args:
        state: Current session state
        rows: Number of rows available for the list

    Returns:
        (text, is_selected) pairs
    """
    if not state.playlists:
        return [("No playlists found", False)]

    start, end = visible_window(state.selection_index, len(state.playlists), rows)
    lines = []
    for index in range(start, end):
        playlist = state.playlists[index]
        selected = index == state.selection_index
        marker = "> " if selected else "  "
        owner = f" by {playlist.owner}" if playlist.owner else ""
        lines.append((f"{marker}{playlist.name}{owner} ({playlist.total_tracks} tracks)", selected))
    return lines


def now_playing_lines(state: SessionState, width: int) -> List[str]:
    """
    Build the text block of the now-playing page

    Args:
        state: Current session state
        width: Available columns

    Returns:
        Lines for title, artists, gauge and times
    """
    snapshot = state.snapshot
    track = snapshot.current_track
    if track is None:
        return ["No track playing", "", progress_bar(0, 0, max(0, width - 4)), "0:00"]

    progress_ms = snapshot.progress_ms or 0
    duration_ms = track.duration_ms
    status = "▶" if snapshot.is_playing else "⏸"
    current = format_time(progress_ms)
    remaining = f"-{format_time(max(0, duration_ms - progress_ms))}"

    gauge_width = max(0, width - 4)
    times = current + remaining.rjust(max(0, gauge_width - len(current)))
    return [
        truncate_string(f"{status} {track.name}", width),
        truncate_string(track.all_artists, width),
        progress_bar(progress_ms, duration_ms, gauge_width),
        times,
    ]


class CursesInput:
    """Non-blocking key source with a bounded wait per poll"""

    def __init__(self, stdscr, timeout_ms: int = 100):
        self.stdscr = stdscr
        self.stdscr.keypad(True)
        self.stdscr.timeout(timeout_ms)

    def poll(self) -> Optional[str]:
        return translate_key(self.stdscr.getch())


class CursesRenderer:
    """Draws the current page onto a curses window"""

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self._accent = curses.A_BOLD
        self._selected = curses.A_REVERSE
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(C_ACCENT, curses.COLOR_GREEN, -1)
            curses.init_pair(C_SELECTED, curses.COLOR_BLACK, curses.COLOR_GREEN)
            self._accent = curses.color_pair(C_ACCENT) | curses.A_BOLD
            self._selected = curses.color_pair(C_SELECTED) | curses.A_BOLD

    def _addstr(self, y: int, x: int, text: str, attr: int = 0) -> None:
        # Avoid curses errors at the bottom-right corner and off-screen
        height, width = self.stdscr.getmaxyx()
        if y < 0 or y >= height or x < 0 or x >= width:
            return
        text = text[:width - x]
        if y == height - 1 and x + len(text) >= width:
            text = text[:width - x - 1]
        if not text:
            return
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            pass

    def _centered(self, y: int, text: str, attr: int = 0) -> None:
        _, width = self.stdscr.getmaxyx()
        self._addstr(y, max(0, (width - len(text)) // 2), text, attr)

    def render(self, state: SessionState) -> None:
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()

        if state.current_page is PageKind.PLAYLIST_LIST:
            self._render_playlist_list(state, height)
        else:
            self._render_now_playing(state, height, width)

        self._centered(height - 1, PAGES[state.current_page].help_text, self._accent)
        self.stdscr.noutrefresh()
        curses.doupdate()

    def _render_playlist_list(self, state: SessionState, height: int) -> None:
        self._centered(0, " Your Playlists ", self._accent)
        for row, (text, selected) in enumerate(playlist_page_lines(state, max(0, height - 4)), start=2):
            self._addstr(row, 1, text, self._selected if selected else 0)

    def _render_now_playing(self, state: SessionState, height: int, width: int) -> None:
        self._centered(0, " Now Playing ", self._accent)
        self._addstr(1, 0, "─" * width, self._accent)

        row = 3
        for line in state.cover_art:
            if row >= height - 7:
                break
            self._centered(row, line, self._accent)
            row += 1
        row += 1

        title, artists, gauge, times = now_playing_lines(state, width)
        self._centered(row, title, self._accent)
        self._centered(row + 1, artists)
        self._addstr(row + 3, 2, gauge, self._accent)
        self._addstr(row + 4, 2, times, self._accent)
