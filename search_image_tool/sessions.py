"""Session bookkeeping for the standalone HTTP server.

A session associates a client-visible identifier with an outbound message
queue. The store is owned by one server instance and only touched from its
event loop, so plain dict operations are enough.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)

STREAMABLE_HTTP = "streamable-http"
LEGACY_SSE = "sse"

_CLOSED = object()


@dataclass
class Session:
    session_id: str
    kind: str = STREAMABLE_HTTP
    closed: bool = False
    streaming: bool = False
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue, repr=False)

    def send(self, message: Dict[str, Any]) -> None:
        """Queue a message for the session's event stream."""
        if self.closed:
            logger.debug("Dropping message for closed session %s", self.session_id)
            return
        self.outbox.put_nowait(message)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.outbox.put_nowait(_CLOSED)

    async def messages(self) -> AsyncIterator[Dict[str, Any]]:
        """Yield queued messages until the session is closed. Messages queued before close are still delivered."""
        self.streaming = True
        try:
            while True:
                message = await self.outbox.get()
                if message is _CLOSED:
                    return
                yield message
        finally:
            self.streaming = False


class SessionStore:
    """Live sessions keyed by identifier."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def create(self, kind: str = STREAMABLE_HTTP) -> Session:
        session = Session(session_id=str(uuid.uuid4()), kind=kind)
        self._sessions[session.session_id] = session
        logger.info("Session %s created (%s), %d active", session.session_id, kind, len(self._sessions))
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[Session]:
        """Forget a session and close its stream. Removing an unknown id is a no-op."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
            logger.info("Session %s closed, %d active", session_id, len(self._sessions))
        return session

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
