"""
Bounded session table for the HTTP transport.

Sessions are created on `initialize` and closed by the client; nothing expires
on its own. Clinical evaluators never see this table.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SessionLimitError(RuntimeError):
    """Raised when a new session would exceed the configured maximum."""


@dataclass
class Session:
    session_id: str
    client_name: Optional[str] = None
    protocol_version: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionTable:
    def __init__(self, max_sessions: int) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._sessions: Dict[str, Session] = {}

    def create(self, client_name: Optional[str] = None, protocol_version: Optional[str] = None) -> Session:
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitError(f"Session limit of {self.max_sessions} reached")
        session = Session(
            session_id=secrets.token_hex(16),
            client_name=client_name,
            protocol_version=protocol_version,
        )
        self._sessions[session.session_id] = session
        logger.info("Opened session %s (%d active)", session.session_id, len(self._sessions))
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        closed = self._sessions.pop(session_id, None) is not None
        if closed:
            logger.info("Closed session %s", session_id)
        return closed

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
