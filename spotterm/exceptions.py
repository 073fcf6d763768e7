"""
Exception classes for spotterm.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide a clear, actionable error message
and to distinguish between the different failure modes.

Exception Hierarchy:
    SpotTermError (base)
        ConfigError - Missing or invalid configuration
        TransportError - Network/connection/decoding failures
        RemoteApiError - Non-success status from the playback API
        AuthError - Anything that prevents obtaining a credential
            AuthProviderError - Non-success status from the identity provider
                AuthorizationExchangeFailed - Code-for-token exchange failed
            AuthorizationAborted - No usable callback was ever received
                AuthorizationTimedOut - Listener gave up waiting
            StateMismatch - Callback state did not match the request
            CredentialPersistError - Local credential file could not be written

Startup errors (ConfigError, AuthError) are fatal and surface to the CLI.
TransportError and RemoteApiError raised inside the interactive session are
logged and discarded by the session controller.
"""

from typing import Optional


class SpotTermError(Exception):
    """
    Base exception for all spotterm errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every spotterm error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., URLs, status codes).
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'url': endpoint that caused the error
                     - 'status': HTTP status code
                     - 'original_error': the underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotTermError):
    """
    Raised when required configuration is missing or invalid.

    This is a CRITICAL error that stops program execution.

    Common causes:
        - client_id / client_secret not provided
        - redirect URI is not an http(s) URL with a host
        - config.yaml has invalid YAML syntax
    """
    pass


class TransportError(SpotTermError):
    """
    Raised when a request could not complete at the transport level.

    Covers connection failures, timeouts and undecodable response bodies.
    NON-CRITICAL inside the interactive session.
    """
    pass


class RemoteApiError(SpotTermError):
    """
    Raised when the playback API answers with a non-success status.

    NON-CRITICAL inside the interactive session.

    Attributes:
        status: HTTP status code returned by the API.
    """

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[dict] = None) -> None:
        super().__init__(message, details)
        self.status = status


class AuthError(SpotTermError):
    """
    Base class for credential lifecycle failures.

    This is a CRITICAL error: without a credential the session cannot start.
    """
    pass


class AuthProviderError(AuthError):
    """
    Raised when the identity provider answers with a non-success status.

    Attributes:
        status: HTTP status code from the token endpoint, if one was received.
    """

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[dict] = None) -> None:
        super().__init__(message, details)
        self.status = status


class AuthorizationExchangeFailed(AuthProviderError):
    """Raised when the authorization code could not be exchanged for a token."""
    pass


class AuthorizationAborted(AuthError):
    """
    Raised when the authorization flow ends without a usable authorization code.

    Common causes:
        - the user denied access (callback carries an 'error' parameter)
        - the callback arrived without a 'code' parameter
        - the local listener could not bind its port
    """
    pass


class AuthorizationTimedOut(AuthorizationAborted):
    """Raised when no callback reached the local listener before the deadline."""
    pass


class StateMismatch(AuthError):
    """
    Raised when the callback's anti-forgery state does not match the request.

    The callback is rejected even if it carries an authorization code.
    """
    pass


class CredentialPersistError(AuthError):
    """Raised when the credential record cannot be written to local storage."""
    pass
