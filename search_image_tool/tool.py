"""The ``search_images`` tool: argument validation, the upstream call, and the MCP result shape."""

import logging
from typing import Any, Dict, Optional

import anyio.to_thread
from pydantic import ValidationError as PydanticValidationError

from .errors import SearchImageError, ValidationError
from .schemas import DEFAULT_PAGE, DEFAULT_PER_PAGE, MAX_PER_PAGE, SearchRequest, SearchResponse
from .unsplash import UnsplashClient

logger = logging.getLogger(__name__)

TOOL_NAME = "search_images"
TOOL_DESCRIPTION = "Search for images on Unsplash"

TOOL_DEFINITION: Dict[str, Any] = {
    "name": TOOL_NAME,
    "title": "Search Images",
    "description": TOOL_DESCRIPTION,
    "inputSchema": {
        "type": "object",
        "properties": {
            "query": {"type": "string", "minLength": 1, "description": "Search query for images"},
            "page": {
                "type": "integer",
                "minimum": 1,
                "default": DEFAULT_PAGE,
                "description": "Page number for pagination (default: 1)",
            },
            "per_page": {
                "type": "integer",
                "minimum": 1,
                "maximum": MAX_PER_PAGE,
                "default": DEFAULT_PER_PAGE,
                "description": "Number of results per page (default: 10, max: 30)",
            },
        },
        "required": ["query"],
    },
    "annotations": {"readOnlyHint": True, "destructiveHint": False, "idempotentHint": True},
}


def parse_arguments(arguments: Optional[Dict[str, Any]]) -> SearchRequest:
    """Validate raw tool arguments. Explicit nulls fall back to the defaults."""
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationError("Invalid arguments: expected an object")
    cleaned = {k: v for k, v in arguments.items() if v is not None}
    try:
        return SearchRequest.model_validate(cleaned)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid arguments: {problems}") from e


def text_result(response: SearchResponse) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": response.to_text()}], "isError": False}


def error_result(error: SearchImageError) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": f"Error: {error}"}], "isError": True}


class SearchImagesTool:
    """Transport-agnostic handler shared by every server flavour."""

    name = TOOL_NAME
    definition = TOOL_DEFINITION

    def __init__(self, client: UnsplashClient):
        self.client = client

    def search(self, arguments: Optional[Dict[str, Any]]) -> SearchResponse:
        request = parse_arguments(arguments)
        logger.info(f"search_images called: query={request.query!r}, page={request.page}, per_page={request.per_page}")
        response = self.client.search_photos(request)
        logger.debug(f"Returning {len(response.results)} images")
        return response

    async def call(self, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Run a search and build a CallToolResult payload.

        The blocking HTTP call runs in a worker thread. It is not cancelled when the
        caller goes away; its result is simply dropped.
        """
        try:
            response = await anyio.to_thread.run_sync(self.search, arguments)
        except SearchImageError as e:
            logger.warning(f"search_images failed: {e}")
            return error_result(e)
        return text_result(response)
