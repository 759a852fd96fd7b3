"""Client for the Unsplash photo search endpoint."""

import logging
from typing import Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from .config import DEFAULT_API_BASE, Configuration
from .errors import ConfigurationError, InvalidCredentials, RateLimited, TransportError, UpstreamError
from .schemas import SearchRequest, SearchResponse, UnsplashSearchPage

logger = logging.getLogger(__name__)


def _error_message(resp: requests.Response) -> str:
    """Extract Unsplash's ``{"errors": [...]}`` body, falling back to the HTTP reason."""
    try:
        errors = resp.json().get("errors")
    except (ValueError, AttributeError):
        errors = None
    if isinstance(errors, list) and errors:
        return ", ".join(str(e) for e in errors)
    return resp.reason or "Unknown error"


def _raise_for_status(resp: requests.Response) -> None:
    if resp.ok:
        return
    if resp.status_code == 401:
        raise InvalidCredentials()
    if resp.status_code in (403, 429):
        raise RateLimited()
    raise UpstreamError(resp.status_code, _error_message(resp))


class UnsplashClient:
    """Issues one ``GET /search/photos`` per search. No retries, no caching."""

    def __init__(
        self,
        access_key: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if not access_key:
            raise ConfigurationError("UNSPLASH_ACCESS_KEY is not configured")
        self._access_key = access_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_configuration(cls, config: Configuration) -> "UnsplashClient":
        return cls(
            access_key=config.unsplash_access_key,
            api_base=config.unsplash_api_base,
            timeout=config.unsplash_timeout,
        )

    def _headers(self) -> dict:
        return {
            "Authorization": f"Client-ID {self._access_key}",
            "Accept-Version": "v1",
        }

    def search_photos(self, request: SearchRequest) -> SearchResponse:
        """Run one search and reshape the upstream page into a SearchResponse.

        Raises InvalidCredentials, RateLimited, UpstreamError or TransportError.
        """
        url = f"{self.api_base}/search/photos"
        params = {"query": request.query, "page": request.page, "per_page": request.per_page}
        logger.debug("Requesting Unsplash with query=%s page=%s per_page=%s", request.query, request.page, request.per_page)

        try:
            resp = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Failed to reach Unsplash: %s", e)
            raise TransportError(str(e)) from e

        try:
            _raise_for_status(resp)
        except (InvalidCredentials, RateLimited, UpstreamError) as e:
            logger.warning("Unsplash returned HTTP %s: %s", resp.status_code, e)
            raise

        try:
            page = UnsplashSearchPage.model_validate(resp.json())
        except ValueError as e:
            # covers both a non-JSON body and a payload missing urls/user/links
            logger.error("Unreadable Unsplash response: %s", e)
            reason = "malformed response" if isinstance(e, PydanticValidationError) else "response is not valid JSON"
            raise UpstreamError(resp.status_code, reason) from e

        logger.info("Unsplash returned %d of %d photos for %r", len(page.results), page.total, request.query)
        return page.to_search_response(request)

    def close(self) -> None:
        self.session.close()
