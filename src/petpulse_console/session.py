"""
Active console session: which role is signed in and its bearer token.

Exactly one role is active at a time. Signing in as a role replaces whatever
session was stored before, so there is never a choice to make between several
stored tokens.
"""

import enum
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import SessionException

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Console roles. ``NONE`` means nobody is signed in."""

    ADMIN = "admin"
    CARETAKER = "caretaker"
    DOCTOR = "doctor"
    NONE = "none"

    @property
    def login_path(self) -> str:
        """Backend login endpoint of the role."""
        if self is Role.NONE:
            raise SessionException("Anonymous sessions cannot log in")
        return f"/{self.value}/login"


# Browser storage keys the web console kept one token under per role
LEGACY_TOKEN_KEYS = {
    "aToken": Role.ADMIN,
    "cToken": Role.CARETAKER,
    "dToken": Role.DOCTOR,
}


@dataclass(frozen=True)
class Session:
    """A role together with its token; anonymous sessions carry no token."""

    role: Role = Role.NONE
    token: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))
        if self.role is Role.NONE and self.token:
            raise SessionException("Anonymous session cannot carry a token")
        if self.role is not Role.NONE and not self.token:
            raise SessionException(f"A {self.role.value} session requires a token")

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.role is not Role.NONE

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "token": self.token}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Session":
        """
        Rebuild a session from its stored form.

        Also accepts the legacy ``{"aToken": ...}`` layout. When it holds more
        than one token the data is ambiguous and rejected.
        """
        if "role" in data:
            return cls(role=Role(data["role"]), token=data.get("token"))

        found = {
            role: data[key] for key, role in LEGACY_TOKEN_KEYS.items() if data.get(key)
        }
        if not found:
            return cls.anonymous()
        if len(found) > 1:
            raise SessionException(
                "Stored data holds tokens for several roles; log in again"
            )
        role, token = next(iter(found.items()))
        return cls(role=role, token=token)

    def __repr__(self) -> str:
        # keep tokens out of logs and tracebacks
        masked = "***" if self.token else None
        return f"Session(role={self.role.value!r}, token={masked!r})"


class SessionStore:
    """Persists the single active session as a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Session:
        """
        Read the stored session.

        A missing file means nobody is signed in.

        Raises:
            SessionException: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            return Session.anonymous()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SessionException(
                "Stored session could not be read",
                session_file=str(self.path),
                original_error=e,
            )

        if not isinstance(data, dict):
            raise SessionException(
                "Stored session has an unexpected format", session_file=str(self.path)
            )
        try:
            return Session.from_dict(data)
        except ValueError as e:
            raise SessionException(
                "Stored session names an unknown role",
                session_file=str(self.path),
                original_error=e,
            )

    def save(self, session: Session) -> None:
        """Replace the stored session. Saving an anonymous session clears it."""
        if not session.is_authenticated:
            self.clear()
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(session.to_dict()), encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise SessionException(
                "Session could not be saved",
                session_file=str(self.path),
                original_error=e,
            )
        logger.info("Session saved", extra={"role": session.role.value})

    def clear(self) -> None:
        """Forget the stored session. A missing file is not an error."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise SessionException(
                "Session could not be cleared",
                session_file=str(self.path),
                original_error=e,
            )
        logger.info("Session cleared")


class MemorySessionStore(SessionStore):
    """Session store that keeps the session in memory only."""

    def __init__(self, session: Optional[Session] = None):
        self._session = session or Session.anonymous()

    def load(self) -> Session:
        return self._session

    def save(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = Session.anonymous()
