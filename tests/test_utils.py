# tests/test_utils.py
"""Test utilities and helpers"""

import logging

import pytest

from spotterm.utils.helpers import (
    STATE_ALPHABET,
    format_duration,
    format_time,
    truncate_string,
    generate_state,
    split_redirect_uri,
)
from spotterm.utils.logger import parse_size, reconfigure_logging_for_session, setup_logging


class TestHelpers:
    """Test helper functions"""

    def test_format_duration(self):
        """Test duration formatting"""
        assert format_duration(90) == "1:30"
        assert format_duration(3661) == "1:01:01"
        assert format_duration(0) == "0:00"
        assert format_duration(-10) == "0:00"

    def test_format_time(self):
        """Test millisecond position formatting"""
        assert format_time(215000) == "3:35"
        assert format_time(999) == "0:00"
        assert format_time(60000) == "1:00"
        assert format_time(-5000) == "0:00"

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a long title", 8) == "a lon..."
        assert truncate_string("abcdef", 2) == "ab"
        assert truncate_string("abc", 0) == ""

    def test_generate_state(self):
        """State tokens are alphanumeric and differ between attempts"""
        state = generate_state()
        assert len(state) == 16
        assert all(ch in STATE_ALPHABET for ch in state)
        assert generate_state() != state
        assert len(generate_state(32)) == 32

    def test_split_redirect_uri(self):
        assert split_redirect_uri("http://127.0.0.1:8888/callback") == ("127.0.0.1", 8888, "/callback")
        assert split_redirect_uri("http://localhost") == ("localhost", 80, "/")

    def test_split_redirect_uri_invalid(self):
        with pytest.raises(ValueError):
            split_redirect_uri("not a uri")
        with pytest.raises(ValueError):
            split_redirect_uri("ftp://127.0.0.1/callback")


class TestLogger:
    """Test logging setup"""

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512KB") == 512 * 1024
        assert parse_size("100B") == 100
        assert parse_size("1.5 kb") == 1536

    def test_parse_size_invalid(self):
        with pytest.raises(ValueError):
            parse_size("lots")

    def test_session_logging_keeps_only_file_handlers(self, temp_dir):
        log_file = temp_dir / "spotterm.log"
        setup_logging(level="INFO", log_file=str(log_file), console_output=True)

        reconfigure_logging_for_session()

        handlers = logging.getLogger().handlers
        assert handlers
        assert all(isinstance(h, logging.FileHandler) for h in handlers)

        for handler in handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)

    def test_session_logging_without_file_installs_null_handler(self):
        setup_logging(level="INFO", log_file=None, console_output=True)

        reconfigure_logging_for_session()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)
        logging.getLogger().removeHandler(handlers[0])
