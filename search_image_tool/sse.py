"""Server-Sent Events framing and a streaming response that always cleans up."""

import json
from typing import Any, AsyncIterator, Callable, Dict, Optional

from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(data: Any, event: Optional[str] = "message", event_id: Optional[str] = None) -> str:
    """Frame one event. Strings are sent verbatim, anything else as compact JSON."""
    payload = data if isinstance(data, str) else json.dumps(data, separators=(",", ":"))
    lines = []
    if event_id is not None:
        lines.append(f"id: {event_id}")
    if event:
        lines.append(f"event: {event}")
    lines.extend(f"data: {line}" for line in (payload.splitlines() or [""]))
    return "\n".join(lines) + "\n\n"


async def single_event(message: Dict[str, Any]) -> AsyncIterator[str]:
    yield format_event(message)


class EventStream(StreamingResponse):
    """``text/event-stream`` response.

    ``on_close`` runs exactly once when the response ends, whether the source
    ran out, the client disconnected, or sending failed.
    """

    def __init__(
        self,
        events: AsyncIterator[str],
        on_close: Optional[Callable[[], Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        status_code: int = 200,
    ):
        self._on_close = on_close
        super().__init__(
            events,
            status_code=status_code,
            media_type="text/event-stream",
            headers={**SSE_HEADERS, **(headers or {})},
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._finish()

    def _finish(self) -> None:
        on_close, self._on_close = self._on_close, None
        if on_close is not None:
            on_close()
