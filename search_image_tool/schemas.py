"""Data models for the Search Image MCP server."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 30
NO_DESCRIPTION = "No description"


class SearchRequest(BaseModel):
    """Validated arguments of a photo search."""

    query: str = Field(..., min_length=1, description="Search query for images")
    page: int = Field(default=DEFAULT_PAGE, ge=1, description="Page number (default: 1)")
    per_page: int = Field(default=DEFAULT_PER_PAGE, description="Results per page (default: 10, max: 30)")

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("page", "per_page", mode="before")
    @classmethod
    def reject_booleans(cls, value):
        # pydantic's lax mode would read True as 1
        if isinstance(value, bool):
            raise ValueError("Input should be a valid integer")
        return value

    @field_validator("per_page")
    @classmethod
    def clamp_per_page(cls, value: int) -> int:
        return max(1, min(value, MAX_PER_PAGE))


class ImageUrls(BaseModel):
    """Image URLs in the sizes exposed to callers."""

    small: str = Field(..., description="Small size (400px wide)")
    regular: str = Field(..., description="Regular size (1080px wide)")
    full: str = Field(..., description="Full resolution")


class Photographer(BaseModel):
    """Author of a photo."""

    name: str = Field(..., description="Display name")
    username: str = Field(..., description="Unsplash username")


class ImageResult(BaseModel):
    """One photo in a search response."""

    id: str = Field(..., description="Unsplash photo identifier")
    description: str = Field(..., description="Description, alt text, or a placeholder")
    urls: ImageUrls
    photographer: Photographer
    link: str = Field(..., description="Photo page on unsplash.com")


class SearchResponse(BaseModel):
    """Reduced search result returned to MCP callers as JSON text."""

    query: str
    total: int = Field(..., ge=0, description="Total number of matching photos")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    page: int = Field(..., ge=1, description="Page returned")
    results: List[ImageResult] = Field(default_factory=list)

    def to_text(self) -> str:
        return self.model_dump_json(indent=2)


# Upstream payload. Only the fields we reshape are declared; anything else is ignored.

class UnsplashUrls(BaseModel):
    small: str
    regular: str
    full: str


class UnsplashUser(BaseModel):
    name: str
    username: str


class UnsplashLinks(BaseModel):
    html: str


class UnsplashPhoto(BaseModel):
    """A photo record from ``GET /search/photos``."""

    id: str
    description: Optional[str] = None
    alt_description: Optional[str] = None
    urls: UnsplashUrls
    user: UnsplashUser
    links: UnsplashLinks

    def to_image_result(self) -> ImageResult:
        return ImageResult(
            id=self.id,
            description=self.description or self.alt_description or NO_DESCRIPTION,
            urls=ImageUrls(small=self.urls.small, regular=self.urls.regular, full=self.urls.full),
            photographer=Photographer(name=self.user.name, username=self.user.username),
            link=self.links.html,
        )


class UnsplashSearchPage(BaseModel):
    """Body of a ``GET /search/photos`` response."""

    total: int
    total_pages: int
    page: Optional[int] = None
    results: List[UnsplashPhoto] = Field(default_factory=list)

    def to_search_response(self, request: SearchRequest) -> SearchResponse:
        return SearchResponse(
            query=request.query,
            total=self.total,
            total_pages=self.total_pages,
            page=self.page or request.page,
            results=[photo.to_image_result() for photo in self.results],
        )
