# Search Image MCP tool - searches photos on Unsplash, hosted by FastMCP.

import argparse
import logging
import sys
from typing import Annotated, Optional

import anyio.to_thread
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import __version__
from .config import configure_logging, install_fatal_handlers, load_configuration
from .errors import ConfigurationError, SearchImageError
from .schemas import DEFAULT_PAGE, DEFAULT_PER_PAGE
from .tool import TOOL_DESCRIPTION, TOOL_NAME, SearchImagesTool
from .unsplash import UnsplashClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "search-image-mcp"

mcp = FastMCP("Search Image")

_client: Optional[UnsplashClient] = None


def get_client() -> UnsplashClient:
    """Return the shared Unsplash client, creating it from the environment on first use."""
    global _client
    if _client is None:
        _client = UnsplashClient.from_configuration(load_configuration())
    return _client


def set_client(client: Optional[UnsplashClient]) -> None:
    global _client
    _client = client


@mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION,
          annotations={"readOnlyHint": True, "destructiveHint": False, "idempotentHint": True})
async def search_images(
    query: Annotated[str, Field(description="Search query for images")],
    page: Annotated[int, Field(description="Page number for pagination (default: 1)")] = DEFAULT_PAGE,
    per_page: Annotated[int, Field(description="Number of results per page (default: 10, max: 30)")] = DEFAULT_PER_PAGE,
) -> str:
    """Search for images on Unsplash.

    Returns a JSON string with query, total, total_pages, page and results. Each
    result has id, description, urls (small, regular, full), photographer
    (name, username) and link. per_page values above 30 are reduced to 30.
    """
    tool = SearchImagesTool(get_client())
    arguments = {"query": query, "page": page, "per_page": per_page}
    try:
        response = await anyio.to_thread.run_sync(tool.search, arguments)
    except SearchImageError as e:
        logger.warning("search_images failed: %s", e)
        raise ToolError(f"Error: {e}") from e
    return response.to_text()


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": SERVICE_NAME, "version": __version__})


@mcp.custom_route("/", methods=["GET"])
async def root(request: Request) -> JSONResponse:
    return JSONResponse({
        "service": SERVICE_NAME,
        "version": __version__,
        "endpoints": {"mcp": "/mcp", "health": "/health"},
    })


def _log_stream(transport: Optional[str]):
    # stdout carries the protocol under stdio
    return sys.stderr if transport == "stdio" else sys.stdout


# host can be specified with HOST env variable
# transport can be specified with MCP_TRANSPORT env variable (defaults to streamable-http)
def run_server(transport: Optional[str] = None, host: Optional[str] = None, port: Optional[int] = None) -> int:
    """Run the MCP server"""
    try:
        config = load_configuration()
    except ConfigurationError as e:
        configure_logging(stream=_log_stream(transport))
        logger.error("%s. Please configure the UNSPLASH_ACCESS_KEY environment variable before running the server", e)
        return 1

    transport = transport or config.mcp_transport
    configure_logging(config.log_level, stream=_log_stream(transport))
    install_fatal_handlers()
    set_client(UnsplashClient.from_configuration(config))
    if transport == "stdio":
        mcp.run(transport=transport)
        return 0

    host = host or config.host
    port = int(port or config.port)
    logger.info(f"Starting Search Image MCP Server on {host}:{port} with transport={transport}")
    logger.info(f"Registered tools: {TOOL_NAME}")
    mcp.run(transport=transport, host=host, port=port)
    return 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search Image MCP Server (FastMCP)")
    parser.add_argument("--transport", dest="transport", default=None,
                        help="Transport to use for FastMCP (default: env MCP_TRANSPORT or streamable-http)")
    parser.add_argument("--host", dest="host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    parser.add_argument("--port", dest="port", type=int, default=None, help="Port to bind (default: env PORT or 8080)")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    return run_server(transport=args.transport, host=args.host, port=args.port)


if __name__ == "__main__":
    raise SystemExit(main())
