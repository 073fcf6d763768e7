"""
Credential record and local credential storage

The credential record is the only artifact persisted by spotterm. It is
stored as a single pretty-printed JSON object with exactly the fields the
token endpoint returns: access_token, token_type, expires_in and
refresh_token (which may be null).

Writes go to a temporary file in the same directory that then replaces the
real file, so a reader sees either the old record or the new one in full.
"""

import json
import os
import tempfile
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import CredentialPersistError
from ..utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_TOKEN_TYPE = "Bearer"
DEFAULT_EXPIRES_IN = 3600


def _pick(new_value: Any, old_value: Any) -> Any:
    """Take the new value if the provider sent one, else keep the old one"""
    return old_value if new_value is None else new_value


@dataclass(frozen=True)
class CredentialRecord:
    """
    Bearer credential issued by the identity provider

    Attributes:
        access_token: Token sent as "Authorization: Bearer ..." to the API
        token_type: Token type reported by the provider, normally "Bearer"
        expires_in: Lifetime of the access token in seconds
        refresh_token: Token used to obtain a new access token, if issued
    """
    access_token: str
    token_type: str = DEFAULT_TOKEN_TYPE
    expires_in: int = DEFAULT_EXPIRES_IN
    refresh_token: Optional[str] = None

    @classmethod
    def from_token_response(cls, data: Mapping[str, Any]) -> "CredentialRecord":
        """
        Build a record from a token endpoint JSON response

        Args:
            data: Parsed JSON body of the token response

        Returns:
            New CredentialRecord

        Raises:
            ValueError: If the response has no usable access_token
        """
        if not isinstance(data, Mapping):
            raise ValueError("Token response is not a JSON object")

        access_token = data.get('access_token')
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Token response has no access_token")

        return cls(
            access_token=access_token,
            token_type=data.get('token_type') or DEFAULT_TOKEN_TYPE,
            expires_in=int(_pick(data.get('expires_in'), DEFAULT_EXPIRES_IN)),
            refresh_token=data.get('refresh_token'),
        )

    def merge(self, data: Mapping[str, Any]) -> "CredentialRecord":
        """
        Merge a refresh response over this record, field by field

        Each field takes the response value when present and non-null and
        keeps the current value otherwise. Refresh tokens are not guaranteed
        to rotate, so a response without one keeps the known refresh token.

        Args:
            data: Parsed JSON body of a refresh_token grant response

        Returns:
            New merged CredentialRecord

        Raises:
            ValueError: If the response has no usable access_token
        """
        fresh = CredentialRecord.from_token_response(data)
        return CredentialRecord(
            access_token=fresh.access_token,
            token_type=_pick(data.get('token_type'), self.token_type),
            expires_in=int(_pick(data.get('expires_in'), self.expires_in)),
            refresh_token=_pick(data.get('refresh_token'), self.refresh_token),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TokenStore:
    """
    Reads and writes the single credential record

    Attributes:
        path: Location of the JSON credential file
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[CredentialRecord]:
        """
        Load the stored credential record

        Returns:
            The record, or None if the file is missing or unreadable.
            An unreadable file is treated like a missing one so that the
            caller falls back to a fresh authorization.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            record = CredentialRecord.from_token_response(data)
        except (OSError, ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return None

        logger.debug(f"Loaded credential record from {self.path}")
        return record

    def save(self, record: CredentialRecord) -> None:
        """
        Atomically replace the stored credential record

        Args:
            record: Record to persist

        Raises:
            CredentialPersistError: If the file cannot be written
        """
        temp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            # Owner read/write only
            os.chmod(temp_path, 0o600)

            os.replace(temp_path, self.path)
            temp_path = None
        except OSError as e:
            raise CredentialPersistError(
                f"Failed to save credential to {self.path}: {e}",
                details={'file_path': str(self.path), 'original_error': str(e)}
            )
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.debug(f"Saved credential record to {self.path}")

    def delete(self) -> bool:
        """
        Remove the stored credential record

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
