"""Search Image MCP Tool"""

__version__ = "1.0.0"

from .errors import (
    InvalidCredentials,
    ProtocolError,
    RateLimited,
    SearchImageError,
    TransportError,
    UpstreamError,
    ValidationError,
)
from .schemas import ImageResult, SearchRequest, SearchResponse
from .tool import TOOL_NAME, SearchImagesTool, parse_arguments
from .unsplash import UnsplashClient

__all__ = [
    "__version__",
    "ImageResult",
    "InvalidCredentials",
    "ProtocolError",
    "RateLimited",
    "SearchImageError",
    "SearchImagesTool",
    "SearchRequest",
    "SearchResponse",
    "TOOL_NAME",
    "TransportError",
    "UnsplashClient",
    "UpstreamError",
    "ValidationError",
    "parse_arguments",
]
