"""Standalone Search Image MCP server.

Serves the ``search_images`` tool over Streamable HTTP (``/mcp``) and the
legacy HTTP+SSE transport (``/sse``) from one Starlette application, with
an explicit session store. Built with ``stateful=False`` it behaves as a
stateless route handler: every POST stands alone and no session is issued.
"""

import argparse
import asyncio
import contextlib
import logging
from typing import Optional

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from . import __version__
from .config import configure_logging, install_fatal_handlers, load_configuration
from .errors import MISSING_SESSION, SESSION_NOT_FOUND, ConfigurationError, ProtocolError
from .rpc import McpDispatcher, error_response, is_initialize_request, parse_message
from .sessions import LEGACY_SSE, STREAMABLE_HTTP, SessionStore
from .sse import EventStream, format_event, single_event
from .tool import SearchImagesTool
from .unsplash import UnsplashClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "search-image-mcp"
SERVER_NAME = "search-image-mcp-server"
SESSION_HEADER = "mcp-session-id"
MCP_PATHS = ("/mcp", "/mcp/v1/sse")
SSE_PATH = "/sse"
SSE_MESSAGE_PATH = "/sse/message"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, mcp-session-id",
    "Access-Control-Max-Age": "86400",
}


def _accepts_event_stream(request: Request) -> bool:
    return "text/event-stream" in request.headers.get("accept", "")


def _rpc_error(error: ProtocolError, request_id=None) -> JSONResponse:
    return JSONResponse(error_response(request_id, error), status_code=error.http_status)


class SearchImageServer:
    """HTTP adapter around the search tool. Owns the session store for its lifetime."""

    def __init__(self, tool: SearchImagesTool, stateful: bool = True, json_response: bool = False):
        self.tool = tool
        self.stateful = stateful
        self.json_response = json_response
        self.dispatcher = McpDispatcher(tool, SERVER_NAME, __version__)
        self.sessions = SessionStore()

    # Streamable HTTP

    async def handle_mcp(self, request: Request) -> Response:
        if request.method == "POST":
            return await self.handle_post(request)
        if not self.stateful:
            return PlainTextResponse("Method Not Allowed", status_code=405)
        if request.method == "DELETE":
            return await self.handle_delete(request)
        return await self.handle_get(request)

    async def handle_post(self, request: Request) -> Response:
        try:
            message = parse_message(await request.body())
        except ProtocolError as e:
            logger.warning("Rejected message: %s", e.message)
            return _rpc_error(e)

        headers = {}
        opens_session = False
        if self.stateful:
            if request.headers.get(SESSION_HEADER):
                session = self._streamable_session(request)
                if session is None:
                    return _rpc_error(ProtocolError(SESSION_NOT_FOUND, "Session not found", http_status=404), message.get("id"))
                headers["Mcp-Session-Id"] = session.session_id
            elif is_initialize_request(message):
                opens_session = True
            else:
                return _rpc_error(ProtocolError(MISSING_SESSION, "Bad Request: No valid session ID provided"))

        response = await self.dispatcher.dispatch(message)
        # a failed initialize leaves no session behind
        if opens_session and "result" in response:
            headers["Mcp-Session-Id"] = self.sessions.create().session_id
        if response is None:
            return Response(status_code=202, headers=headers)
        if self.json_response or not _accepts_event_stream(request):
            return JSONResponse(response, headers=headers)
        return EventStream(single_event(response), headers=headers)

    def _streamable_session(self, request: Request):
        session = self.sessions.get(request.headers.get(SESSION_HEADER))
        if session is None or session.kind != STREAMABLE_HTTP:
            return None
        return session

    async def handle_get(self, request: Request) -> Response:
        """Open the server-to-client stream of a session."""
        session = self._streamable_session(request)
        if session is None:
            return PlainTextResponse("Invalid or missing session ID", status_code=400)
        if session.streaming:
            return PlainTextResponse("Conflict: a stream is already open for this session", status_code=409)

        async def events():
            async for message in session.messages():
                yield format_event(message)

        return EventStream(events(), headers={"Mcp-Session-Id": session.session_id})

    async def handle_delete(self, request: Request) -> Response:
        session = self._streamable_session(request)
        if session is None:
            return PlainTextResponse("Invalid or missing session ID", status_code=400)
        self.sessions.remove(session.session_id)
        return Response(status_code=200)

    # Legacy HTTP+SSE

    async def handle_sse(self, request: Request) -> Response:
        session = self.sessions.create(kind=LEGACY_SSE)
        endpoint = f"{SSE_MESSAGE_PATH}?sessionId={session.session_id}"

        async def events():
            yield format_event(endpoint, event="endpoint")
            async for message in session.messages():
                yield format_event(message)

        return EventStream(events(), on_close=lambda: self.sessions.remove(session.session_id))

    async def handle_sse_message(self, request: Request) -> Response:
        session_id = request.query_params.get("sessionId")
        if not session_id:
            return PlainTextResponse("Missing sessionId", status_code=400)
        session = self.sessions.get(session_id)
        if session is None or session.kind != LEGACY_SSE:
            return PlainTextResponse("Session not found", status_code=404)
        try:
            message = parse_message(await request.body())
        except ProtocolError as e:
            return _rpc_error(e)

        response = await self.dispatcher.dispatch(message)
        if response is not None:
            session.send(response)
        return PlainTextResponse("Accepted", status_code=202)

    # Everything else

    async def handle_options(self, request: Request) -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    async def health(self, request: Request) -> Response:
        return JSONResponse({
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
            "activeSessions": len(self.sessions),
        })

    async def root(self, request: Request) -> Response:
        return JSONResponse({
            "service": SERVER_NAME,
            "version": __version__,
            "endpoints": {
                "mcp": MCP_PATHS[0],
                "sse": SSE_PATH,
                "health": "/health",
            },
        })

    async def internal_error(self, request: Request, exc: Exception) -> Response:
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @contextlib.asynccontextmanager
    async def lifespan(self, app: Starlette):
        install_fatal_handlers(asyncio.get_running_loop())
        try:
            yield
        finally:
            self.sessions.close_all()
            self.tool.client.close()

    def build(self) -> Starlette:
        routes = [
            Route(path, self.handle_mcp, methods=["GET", "POST", "DELETE"]) for path in MCP_PATHS
        ]
        if self.stateful:
            routes += [
                Route(SSE_PATH, self.handle_sse, methods=["GET"]),
                Route(SSE_MESSAGE_PATH, self.handle_sse_message, methods=["POST"]),
            ]
        options_paths = MCP_PATHS + ((SSE_PATH, SSE_MESSAGE_PATH) if self.stateful else ())
        routes += [Route(path, self.handle_options, methods=["OPTIONS"]) for path in options_paths]
        routes += [
            Route("/health", self.health, methods=["GET"]),
            Route("/", self.root, methods=["GET"]),
        ]
        app = Starlette(
            routes=routes,
            exception_handlers={Exception: self.internal_error},
            lifespan=self.lifespan,
        )
        app.state.server = self
        return app


def create_app(client: UnsplashClient, stateful: bool = True, json_response: bool = False) -> Starlette:
    return SearchImageServer(SearchImagesTool(client), stateful=stateful, json_response=json_response).build()


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    json_response: Optional[bool] = None,
    stateless_http: Optional[bool] = None,
) -> int:
    """Run the server with optional overrides from the CLI; everything else comes from the environment."""
    configure_logging()
    try:
        config = load_configuration()
    except ConfigurationError as e:
        logger.error("%s. Please configure the UNSPLASH_ACCESS_KEY environment variable before running the server", e)
        return 1

    install_fatal_handlers()
    host = host or config.host
    port = int(port or config.port)
    json_response = config.mcp_json_response if json_response is None else json_response
    stateful = not (config.mcp_stateless_http if stateless_http is None else stateless_http)

    app = create_app(UnsplashClient.from_configuration(config), stateful=stateful, json_response=json_response)
    logger.info(
        "Starting Search Image MCP server on %s:%s stateful=%s json_response=%s",
        host, port, stateful, json_response,
    )
    logger.info(f"MCP endpoint: http://localhost:{port}{MCP_PATHS[0]}  health: http://localhost:{port}/health")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())
    return 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search Image MCP Server (standalone HTTP)")
    parser.add_argument("--host", dest="host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    parser.add_argument("--port", dest="port", type=int, default=None, help="Port to bind (default: env PORT or 8080)")
    parser.add_argument("--json-response", dest="json_response", action="store_true",
                        help="Answer POSTs with plain JSON (overrides env MCP_JSON_RESPONSE)")
    parser.add_argument("--no-json-response", dest="json_response", action="store_false",
                        help="Answer POSTs with an SSE stream when the client accepts one")
    parser.add_argument("--stateless-http", dest="stateless_http", action="store_true",
                        help="Handle every POST independently, without sessions")
    parser.add_argument("--stateful-http", dest="stateless_http", action="store_false",
                        help="Issue and require MCP session IDs (default)")
    parser.set_defaults(json_response=None, stateless_http=None)
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    return run_server(
        host=args.host,
        port=args.port,
        json_response=args.json_response,
        stateless_http=args.stateless_http,
    )


if __name__ == "__main__":
    raise SystemExit(main())
