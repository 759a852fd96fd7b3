"""Error taxonomy shared by the tool handler, the Unsplash client and the HTTP adapters."""

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR

# Session errors use the implementation-defined server error range.
MISSING_SESSION = -32000
SESSION_NOT_FOUND = -32001

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "MISSING_SESSION",
    "PARSE_ERROR",
    "SESSION_NOT_FOUND",
    "ConfigurationError",
    "InvalidCredentials",
    "ProtocolError",
    "RateLimited",
    "SearchImageError",
    "TransportError",
    "UpstreamError",
    "ValidationError",
]


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or invalid."""


class SearchImageError(Exception):
    """Base class for failures reported back to the MCP caller as an error-flagged tool result."""


class ValidationError(SearchImageError):
    """Tool arguments are missing or malformed. The upstream API is never called."""


class InvalidCredentials(SearchImageError):
    """Unsplash answered 401."""

    def __init__(self, message: str = "Invalid Unsplash API key. Please check your UNSPLASH_ACCESS_KEY environment variable."):
        super().__init__(message)


class RateLimited(SearchImageError):
    """Unsplash answered 403 or 429."""

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class UpstreamError(SearchImageError):
    """Unsplash answered with any other non-2xx status, or with a body we cannot read."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"Unsplash API error: {status} - {message}")


class TransportError(SearchImageError):
    """The request never got an HTTP answer (DNS, connection reset, TLS, ...)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Failed to search images: {message}")


class ProtocolError(Exception):
    """A malformed or unroutable JSON-RPC message. Always reported as a JSON-RPC error object."""

    def __init__(self, code: int, message: str, http_status: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status

    def to_error(self) -> dict:
        return {"code": self.code, "message": self.message}
