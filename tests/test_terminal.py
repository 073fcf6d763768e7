# tests/test_terminal.py
"""Test key translation and page content for the curses front end"""

import curses
from unittest.mock import DEFAULT, Mock, patch

import pytest

from spotterm.session.state import PageKind, SessionState
from spotterm.session.terminal import (
    CursesInput,
    CursesRenderer,
    now_playing_lines,
    playlist_page_lines,
    progress_bar,
    translate_key,
    visible_window,
)
from spotterm.spotify.models import PlaybackSnapshot, Playlist, Track


def playing_state(progress_ms=45000, duration_ms=210000, is_playing=True):
    track = Track(name="Test Song", artists=("Test Artist", "Guest"), duration_ms=duration_ms, id="t1")
    return SessionState(
        current_page=PageKind.NOW_PLAYING,
        snapshot=PlaybackSnapshot(is_playing=is_playing, current_track=track, progress_ms=progress_ms),
    )


class TestKeyTranslation:
    """Test curses key code translation"""

    @pytest.mark.parametrize('code, name', [
        (curses.KEY_UP, 'up'),
        (curses.KEY_DOWN, 'down'),
        (curses.KEY_LEFT, 'left'),
        (curses.KEY_RIGHT, 'right'),
        (curses.KEY_ENTER, 'enter'),
        (10, 'enter'),
        (13, 'enter'),
        (27, 'esc'),
        (ord('q'), 'q'),
        (ord('k'), 'k'),
        (ord('p'), 'p'),
    ])
    def test_known_keys(self, code, name):
        assert translate_key(code) == name

    @pytest.mark.parametrize('code', [-1, curses.KEY_RESIZE, 0, 200])
    def test_ignored_keys(self, code):
        assert translate_key(code) is None

    def test_input_source(self):
        stdscr = Mock()
        stdscr.getch.side_effect = [ord('j'), -1]

        source = CursesInput(stdscr, timeout_ms=100)

        stdscr.timeout.assert_called_once_with(100)
        stdscr.keypad.assert_called_once_with(True)
        assert source.poll() == 'j'
        assert source.poll() is None


class TestPlaylistPageLines:
    """Test playlist page content"""

    def test_empty_list(self):
        assert playlist_page_lines(SessionState(), rows=10) == [("No playlists found", False)]

    def test_marks_selection(self, sample_playlists):
        state = SessionState(playlists=sample_playlists, selection_index=1)

        lines = playlist_page_lines(state, rows=10)

        assert [selected for _, selected in lines] == [False, True, False]
        assert lines[1][0].startswith("> Focus")

    def test_scrolls_to_selection(self, sample_playlists):
        state = SessionState(playlists=sample_playlists, selection_index=2)

        lines = playlist_page_lines(state, rows=2)

        assert [text.strip() for text, _ in lines] == ["Focus (0 tracks)", "> Evening (0 tracks)"]

    def test_shows_owner(self):
        state = SessionState(playlists=[Playlist(id='pl_1', name='Morning', total_tracks=12, owner='Ana')])

        assert playlist_page_lines(state, rows=5) == [("> Morning by Ana (12 tracks)", True)]

    def test_visible_window(self):
        assert visible_window(0, 100, 10) == (0, 10)
        assert visible_window(50, 100, 10) == (45, 55)
        assert visible_window(99, 100, 10) == (90, 100)
        assert visible_window(0, 0, 10) == (0, 0)


class TestNowPlayingLines:
    """Test now-playing page content"""

    def test_track_lines(self):
        title, artists, gauge, times = now_playing_lines(playing_state(), width=40)

        assert title == "▶ Test Song"
        assert artists == "Test Artist, Guest"
        assert len(gauge) == 36
        assert times.startswith("0:45")
        assert times.endswith("-2:45")
        assert len(times) == 36

    def test_paused(self):
        title = now_playing_lines(playing_state(is_playing=False), width=40)[0]
        assert title.startswith("⏸")

    def test_remaining_never_negative(self):
        times = now_playing_lines(playing_state(progress_ms=215000, duration_ms=210000), width=40)[3]
        assert times.endswith("-0:00")

    def test_unknown_progress(self):
        times = now_playing_lines(playing_state(progress_ms=None), width=40)[3]
        assert times.startswith("0:00")
        assert times.endswith("-3:30")

    def test_nothing_playing(self):
        lines = now_playing_lines(SessionState(current_page=PageKind.NOW_PLAYING), width=40)
        assert lines[0] == "No track playing"

    def test_progress_bar(self):
        assert progress_bar(0, 1000, 10) == "╌" * 10
        assert progress_bar(500, 1000, 10) == "━" * 5 + "╌" * 5
        assert progress_bar(2000, 1000, 10) == "━" * 10
        assert progress_bar(100, 0, 4) == "╌" * 4
        assert progress_bar(100, 1000, 0) == ""


class TestRenderer:
    """Test drawing onto a fake window"""

    @pytest.fixture
    def stdscr(self):
        stdscr = Mock()
        stdscr.getmaxyx.return_value = (24, 80)
        return stdscr

    @pytest.fixture
    def renderer(self, stdscr):
        with patch.multiple(
            'spotterm.session.terminal.curses',
            curs_set=DEFAULT,
            doupdate=DEFAULT,
            has_colors=Mock(return_value=False),
        ):
            yield CursesRenderer(stdscr)

    def drawn_text(self, stdscr):
        return [c.args[2] for c in stdscr.addstr.call_args_list]

    def test_playlist_page(self, renderer, stdscr, sample_playlists):
        renderer.render(SessionState(playlists=sample_playlists))

        text = self.drawn_text(stdscr)
        assert " Your Playlists " in text
        assert any("Morning" in line for line in text)
        assert any("Enter:Play" in line for line in text)
        stdscr.erase.assert_called_once()

    def test_now_playing_page(self, renderer, stdscr):
        state = playing_state()
        state.cover_art = ["@@@@", "####"]

        renderer.render(state)

        text = self.drawn_text(stdscr)
        assert " Now Playing " in text
        assert "@@@@" in text
        assert "▶ Test Song" in text
        assert any("p/Esc:Playlists" in line for line in text)

    def test_never_writes_outside_window(self, renderer, stdscr, sample_playlists):
        stdscr.getmaxyx.return_value = (3, 10)

        renderer.render(SessionState(playlists=sample_playlists * 5))

        for c in stdscr.addstr.call_args_list:
            y, x, text = c.args[:3]
            assert 0 <= y < 3
            assert x + len(text) <= 10
            if y == 2:
                assert x + len(text) < 10
