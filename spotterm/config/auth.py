"""
OAuth2 authentication and token management for Spotify API

This module implements the authorization code flow used to obtain and keep
a bearer credential for the Spotify Web API.

Key features:
- Refresh of the stored credential on every start, keeping the previous
  refresh token when the provider does not rotate it
- Full authorization through the user's browser with a one-shot local
  HTTP listener that captures the redirect
- Anti-forgery state generated per attempt and verified on the callback
- Atomic credential persistence through TokenStore

The authentication flow is the OAuth2 authorization code grant:
1. Try refresh_token grant if a stored refresh token exists
2. Otherwise (or if refresh fails) generate the authorization URL
3. Open the browser for user consent
4. Receive the authorization code on the local callback listener
5. Exchange the code for access/refresh tokens
6. Store the credential for the next start

The listener is the only blocking step in spotterm. It runs to completion
before the interactive session starts.
"""

import time
import webbrowser
import urllib.parse
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Callable, Dict, Iterable, List, Optional

import requests

from .token_store import CredentialRecord, TokenStore
from ..exceptions import (
    AuthorizationAborted,
    AuthorizationExchangeFailed,
    AuthorizationTimedOut,
    ConfigError,
    StateMismatch,
)
from ..utils.helpers import generate_state, split_redirect_uri
from ..utils.logger import get_logger


logger = get_logger(__name__)

SUCCESS_HTML = """
<html>
<head><title>Authorization Success</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #1DB954;">Authorization Successful!</h1>
    <p>You can now close this window and return to the terminal.</p>
</body>
</html>
"""

FAILURE_HTML = """
<html>
<head><title>Authorization Error</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #E22134;">Authorization Failed</h1>
    <p>{reason}</p>
    <p>Return to the terminal for details.</p>
</body>
</html>
"""


class CallbackHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for OAuth2 callback processing

    Requests to the configured callback path record their query parameters
    on the server and get a short HTML page back. Requests to any other
    path (browsers like to ask for /favicon.ico) get a 404 and do not
    count as the callback.

    The callback URL format is:
    - Success: http://callback_url?code=AUTHORIZATION_CODE&state=STATE
    - Error: http://callback_url?error=ERROR_CODE&state=STATE
    """

    # Socket timeout so a half-open connection cannot hang the listener
    timeout = 10

    def do_GET(self):
        parsed_url = urllib.parse.urlparse(self.path)

        if parsed_url.path != self.server.callback_path:
            self.send_response(404)
            self.send_header('Content-type', 'text/plain; charset=utf-8')
            self.end_headers()
            self.wfile.write(b"Not found")
            return

        params = {key: values[0] for key, values in urllib.parse.parse_qs(parsed_url.query).items()}
        self.server.callback_params = params

        if 'error' in params:
            status, body = 400, FAILURE_HTML.format(reason=f"Error: {params['error']}")
        elif params.get('state') != self.server.expected_state:
            status, body = 400, FAILURE_HTML.format(reason="The request could not be verified.")
        elif 'code' not in params:
            status, body = 400, FAILURE_HTML.format(reason="No authorization code was received.")
        else:
            status, body = 200, SUCCESS_HTML

        self.send_response(status)
        self.send_header('Content-type', 'text/html; charset=utf-8')
        self.end_headers()
        self.wfile.write(body.encode('utf-8'))

    def log_message(self, format, *args):
        """Route HTTP server logs to the file log instead of stderr"""
        logger.debug(f"Callback listener: {format % args}")


class CallbackServer(HTTPServer):
    """HTTPServer that remembers the parameters of the first callback request"""

    def __init__(self, address, callback_path: str, expected_state: str):
        super().__init__(address, CallbackHandler)
        self.callback_path = callback_path
        self.expected_state = expected_state
        self.callback_params: Optional[Dict[str, str]] = None


class CallbackListener:
    """
    One-shot local listener for the authorization redirect

    Binds on entering the context so the port is ready before the browser
    is opened, serves requests until exactly one reaches the callback path,
    and closes the socket on exit. It never accepts a second callback.

    Usage:
        with CallbackListener(redirect_uri, state, timeout=300) as listener:
            webbrowser.open(url)
            params = listener.wait_for_callback()
    """

    # How often the wait loop wakes up to check the deadline
    POLL_INTERVAL = 0.5

    def __init__(self, redirect_uri: str, expected_state: str, timeout: float = 300):
        self.host, self.port, self.callback_path = split_redirect_uri(redirect_uri)
        self.expected_state = expected_state
        self.timeout = timeout
        self._server: Optional[CallbackServer] = None

    def __enter__(self) -> "CallbackListener":
        try:
            self._server = CallbackServer((self.host, self.port), self.callback_path, self.expected_state)
        except OSError as e:
            raise AuthorizationAborted(
                f"Could not listen on {self.host}:{self.port} for the authorization callback: {e}",
                details={'host': self.host, 'port': self.port}
            )
        self._server.timeout = self.POLL_INTERVAL
        # Port 0 asks the OS for a free port; report the real one
        self.port = self._server.server_address[1]
        logger.debug(f"Callback listener bound on {self.host}:{self.port}{self.callback_path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._server is not None:
            self._server.server_close()
            self._server = None
            logger.debug("Callback listener closed")

    def wait_for_callback(self) -> Dict[str, str]:
        """
        Block until one request reaches the callback path

        Returns:
            Query parameters of the callback request (first value per key)

        Raises:
            AuthorizationTimedOut: If no callback arrives before the deadline
        """
        if self._server is None:
            raise RuntimeError("CallbackListener must be entered before waiting")

        deadline = time.monotonic() + self.timeout
        while self._server.callback_params is None:
            if time.monotonic() >= deadline:
                raise AuthorizationTimedOut(
                    f"No authorization callback received within {self.timeout} seconds",
                    details={'callback_path': self.callback_path}
                )
            self._server.handle_request()

        params = self._server.callback_params
        # Stop listening as soon as the callback has been served
        self.close()
        return params


class SpotifyAuth:
    """
    Spotify OAuth2 credential lifecycle manager

    Produces a valid access token on demand. A stored credential with a
    refresh token is refreshed first; any refresh failure falls back to the
    full browser authorization. Failures of the full authorization are
    raised as AuthError subclasses and are fatal to the caller.

    Attributes:
        client_id: Spotify application client ID
        client_secret: Spotify application client secret
        redirect_uri: OAuth2 callback URL served by the local listener
        scopes: Default permission scopes for authorization
        token_store: Storage for the single credential record
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        token_store: TokenStore,
        scopes: Optional[Iterable[str]] = None,
        authorize_url: str = "https://accounts.spotify.com/authorize",
        token_url: str = "https://accounts.spotify.com/api/token",
        request_timeout: float = 10,
        callback_timeout: float = 300,
        session: Optional[requests.Session] = None,
        browser_opener: Callable[[str], bool] = webbrowser.open,
        listener_factory: Callable[..., CallbackListener] = CallbackListener,
        state_factory: Callable[[], str] = generate_state,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.token_store = token_store
        self.scopes = list(scopes or [])
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.request_timeout = request_timeout
        self.callback_timeout = callback_timeout
        self._session = session or requests.Session()
        self._browser_opener = browser_opener
        self._listener_factory = listener_factory
        self._state_factory = state_factory

    @classmethod
    def from_settings(cls, settings, **overrides) -> "SpotifyAuth":
        """
        Build a manager from application settings

        Args:
            settings: Loaded Settings instance
            **overrides: Constructor arguments that replace the settings values

        Returns:
            Configured SpotifyAuth
        """
        kwargs = dict(
            client_id=settings.spotify.client_id,
            client_secret=settings.spotify.client_secret,
            redirect_uri=settings.spotify.redirect_uri,
            token_store=TokenStore(settings.get_token_storage_path()),
            scopes=settings.spotify.scopes,
            authorize_url=settings.spotify.authorize_url,
            token_url=settings.spotify.token_url,
            request_timeout=settings.network.request_timeout,
            callback_timeout=settings.network.callback_timeout,
        )
        kwargs.update(overrides)
        return cls(**kwargs)

    def _resolve_scopes(self, scopes: Optional[Iterable[str]]) -> List[str]:
        # Keep first-seen order while dropping duplicates
        return list(dict.fromkeys(scopes if scopes is not None else self.scopes))

    def build_authorization_url(self, state: str, scopes: Optional[Iterable[str]] = None) -> str:
        """
        Build the provider's authorization URL

        Args:
            state: Anti-forgery token for this attempt
            scopes: Permission scopes to request (defaults to self.scopes)

        Returns:
            Complete URL to open in the browser
        """
        params = {
            'response_type': 'code',  # Authorization code flow
            'client_id': self.client_id,
            'scope': ' '.join(self._resolve_scopes(scopes)),
            'redirect_uri': self.redirect_uri,
            'state': state,
        }
        return f"{self.authorize_url}?{urllib.parse.urlencode(params)}"

    def _post_token_request(self, data: Dict[str, str]) -> requests.Response:
        data = dict(data, client_id=self.client_id, client_secret=self.client_secret)
        headers = {'Content-Type': 'application/x-www-form-urlencoded'}
        return self._session.post(self.token_url, headers=headers, data=data, timeout=self.request_timeout)

    def _refresh_token(self, record: CredentialRecord) -> Optional[CredentialRecord]:
        """
        Refresh the access token using the stored refresh token

        Args:
            record: Stored credential record carrying a refresh_token

        Returns:
            Merged credential record if refresh succeeded, None if it failed
            for any reason (network, status, malformed body). A failed
            refresh is not an error: the caller re-authorizes instead.
        """
        try:
            response = self._post_token_request({
                'grant_type': 'refresh_token',
                'refresh_token': record.refresh_token,
            })
        except requests.RequestException as e:
            logger.warning(f"Failed to refresh token: {e}")
            return None

        if not 200 <= response.status_code < 300:
            logger.warning(f"Failed to refresh token: token endpoint returned {response.status_code}")
            return None

        try:
            return record.merge(response.json())
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to refresh token: malformed response ({e})")
            return None

    def _exchange_code_for_token(self, code: str) -> CredentialRecord:
        """
        Exchange authorization code for access and refresh tokens

        Args:
            code: Authorization code from the callback

        Returns:
            New credential record

        Raises:
            AuthorizationExchangeFailed: On transport error, non-success status
                                         or a response without access_token
        """
        try:
            response = self._post_token_request({
                'grant_type': 'authorization_code',
                'code': code,
                'redirect_uri': self.redirect_uri,  # Must match authorization request
            })
        except requests.RequestException as e:
            raise AuthorizationExchangeFailed(
                f"Error exchanging code for token: {e}",
                details={'url': self.token_url, 'original_error': str(e)}
            )

        if not 200 <= response.status_code < 300:
            raise AuthorizationExchangeFailed(
                f"Token endpoint rejected the authorization code ({response.status_code})",
                status=response.status_code,
                details={'url': self.token_url, 'body': response.text[:200]}
            )

        try:
            return CredentialRecord.from_token_response(response.json())
        except (ValueError, TypeError) as e:
            raise AuthorizationExchangeFailed(
                f"Malformed token response: {e}",
                status=response.status_code,
                details={'url': self.token_url}
            )

    def _open_browser(self, url: str) -> None:
        # Best-effort: the URL has already been printed
        try:
            opened = self._browser_opener(url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open a browser: {e}")
            return
        if not opened:
            logger.debug("No browser could be launched")

    def _check_callback(self, params: Dict[str, str], state: str) -> str:
        """
        Validate callback parameters and return the authorization code

        Raises:
            AuthorizationAborted: On provider error or missing code
            StateMismatch: If state is missing or differs from the generated one
        """
        if 'error' in params:
            raise AuthorizationAborted(
                f"Authorization failed: {params['error']}",
                details={'error': params['error']}
            )

        if params.get('state') != state:
            raise StateMismatch(
                "Authorization callback state does not match the request",
                details={'received_state': params.get('state')}
            )

        code = params.get('code')
        if not code:
            raise AuthorizationAborted("No authorization code received")
        return code

    def authorize(self, scopes: Optional[Iterable[str]] = None) -> CredentialRecord:
        """
        Perform the complete authorization code flow

        Args:
            scopes: Permission scopes to request (defaults to self.scopes)

        Returns:
            Newly stored credential record

        Raises:
            ConfigError: If client credentials are not configured
            AuthorizationAborted: If no usable callback is received
            AuthorizationTimedOut: If the listener times out
            StateMismatch: If the callback state does not match
            AuthorizationExchangeFailed: If the code exchange fails
            CredentialPersistError: If the credential cannot be written
        """
        if not self.client_id or not self.client_secret:
            raise ConfigError("Spotify client_id and client_secret must be configured")

        state = self._state_factory()
        authorization_url = self.build_authorization_url(state, scopes)

        logger.console_info("Starting authorization flow...")
        with self._listener_factory(self.redirect_uri, state, timeout=self.callback_timeout) as listener:
            logger.console_info("Opening browser for Spotify authorization...")
            logger.console_info(f"If browser doesn't open, visit: {authorization_url}")
            self._open_browser(authorization_url)

            logger.console_info("Waiting for authorization callback...")
            params = listener.wait_for_callback()

        code = self._check_callback(params, state)
        logger.debug("Authorization code received")

        record = self._exchange_code_for_token(code)
        self.token_store.save(record)
        logger.console_info("Authorization successful!")
        return record

    def get_valid_token(self, scopes: Optional[Iterable[str]] = None) -> str:
        """
        Get a valid access token, refreshing or re-authorizing as needed

        Flow:
        1. Load the stored credential
        2. If it carries a refresh token, refresh it and return on success
        3. Otherwise, or if refresh failed, run the full authorization

        Args:
            scopes: Permission scopes for a full authorization

        Returns:
            Access token string

        Raises:
            AuthError: If no credential could be obtained
        """
        record = self.token_store.load()

        if record is not None and record.refresh_token:
            logger.console_info("Refreshing access token...")
            refreshed = self._refresh_token(record)
            if refreshed is not None:
                self.token_store.save(refreshed)
                logger.console_info("Access token refreshed.")
                return refreshed.access_token
            logger.warning("Refresh token invalid, doing full authorization again...")
        elif record is not None:
            logger.info("Stored credential has no refresh token, re-authorizing")

        logger.console_info("No valid token found, starting authorization...")
        return self.authorize(scopes).access_token

    def has_stored_credential(self) -> bool:
        return self.token_store.load() is not None

    def revoke_token(self) -> bool:
        """
        Delete the stored credential

        Note:
            This only removes local storage. The tokens remain valid on
            Spotify's side until they expire.

        Returns:
            True if a stored credential was removed
        """
        removed = self.token_store.delete()
        if removed:
            logger.console_info("Token revoked successfully")
        return removed
