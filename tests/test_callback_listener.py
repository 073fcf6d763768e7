# tests/test_callback_listener.py
"""Test the one-shot redirect listener over a real loopback socket"""

import threading

import pytest
import requests

from spotterm.config.auth import CallbackListener
from spotterm.exceptions import AuthorizationAborted, AuthorizationTimedOut


REDIRECT_URI = "http://127.0.0.1:0/callback"


def fetch_in_background(urls, results):
    def run():
        for url in urls:
            results.append(requests.get(url, timeout=5).status_code)
    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


class TestCallbackListener:
    """Test CallbackListener behavior"""

    def test_captures_callback_and_closes(self):
        with CallbackListener(REDIRECT_URI, "STATE", timeout=5) as listener:
            base = f"http://127.0.0.1:{listener.port}"
            results = []
            thread = fetch_in_background([f"{base}/callback?code=abc123&state=STATE"], results)

            params = listener.wait_for_callback()
            thread.join(timeout=5)

        assert params == {'code': 'abc123', 'state': 'STATE'}
        assert results == [200]

        # Single use: nothing listens any more
        with pytest.raises(requests.ConnectionError):
            requests.get(f"{base}/callback?code=again&state=STATE", timeout=2)

    def test_ignores_other_paths(self):
        with CallbackListener(REDIRECT_URI, "STATE", timeout=5) as listener:
            base = f"http://127.0.0.1:{listener.port}"
            results = []
            thread = fetch_in_background(
                [f"{base}/favicon.ico", f"{base}/callback?code=abc123&state=STATE"], results
            )

            params = listener.wait_for_callback()
            thread.join(timeout=5)

        assert results == [404, 200]
        assert params['code'] == 'abc123'

    def test_wrong_state_gets_error_page(self):
        with CallbackListener(REDIRECT_URI, "STATE", timeout=5) as listener:
            results = []
            thread = fetch_in_background(
                [f"http://127.0.0.1:{listener.port}/callback?code=abc123&state=OTHER"], results
            )

            params = listener.wait_for_callback()
            thread.join(timeout=5)

        # Parameters are still handed over; the caller decides
        assert params['state'] == 'OTHER'
        assert results == [400]

    def test_times_out(self):
        with CallbackListener(REDIRECT_URI, "STATE", timeout=0.2) as listener:
            with pytest.raises(AuthorizationTimedOut):
                listener.wait_for_callback()

    def test_port_in_use(self):
        with CallbackListener(REDIRECT_URI, "STATE", timeout=5) as first:
            second = CallbackListener(f"http://127.0.0.1:{first.port}/callback", "STATE", timeout=5)
            with pytest.raises(AuthorizationAborted):
                second.__enter__()

    def test_wait_requires_bound_listener(self):
        listener = CallbackListener(REDIRECT_URI, "STATE", timeout=5)
        with pytest.raises(RuntimeError):
            listener.wait_for_callback()
