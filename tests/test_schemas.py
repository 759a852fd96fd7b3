"""Tests for the request and response models."""

import json

import pytest
from pydantic import ValidationError

from conftest import make_page, make_photo
from search_image_tool.schemas import (
    NO_DESCRIPTION,
    SearchRequest,
    SearchResponse,
    UnsplashPhoto,
    UnsplashSearchPage,
)


class TestSearchRequest:
    """Test argument validation and defaults."""

    def test_defaults(self):
        """Test page and per_page defaults."""
        request = SearchRequest(query="cats")
        assert request.page == 1
        assert request.per_page == 10

    @pytest.mark.parametrize("per_page,expected", [(31, 30), (100, 30), (30, 30), (1, 1), (0, 1), (-5, 1)])
    def test_per_page_is_clamped(self, per_page, expected):
        """Test per_page is clamped into 1..30 instead of rejected."""
        assert SearchRequest(query="cats", per_page=per_page).per_page == expected

    def test_numeric_strings_accepted(self):
        """Test numeric strings are coerced to integers."""
        request = SearchRequest.model_validate({"query": "cats", "page": "2", "per_page": "5"})
        assert request.page == 2
        assert request.per_page == 5

    @pytest.mark.parametrize("field,value", [("page", "abc"), ("per_page", "many"), ("page", 1.5), ("per_page", True)])
    def test_non_numeric_rejected(self, field, value):
        """Test non-integer page/per_page values are rejected."""
        with pytest.raises(ValidationError):
            SearchRequest.model_validate({"query": "cats", field: value})

    def test_page_below_one_rejected(self):
        """Test page must be at least 1."""
        with pytest.raises(ValidationError):
            SearchRequest(query="cats", page=0)

    @pytest.mark.parametrize("query", ["", "   "])
    def test_empty_query_rejected(self, query):
        """Test blank queries are rejected."""
        with pytest.raises(ValidationError):
            SearchRequest(query=query)

    def test_query_is_stripped(self):
        """Test surrounding whitespace is removed from the query."""
        assert SearchRequest(query="  mountain lake ").query == "mountain lake"


class TestUnsplashPhoto:
    """Test reshaping of upstream photo records."""

    def test_to_image_result(self):
        """Test the reduced record keeps only the exposed fields."""
        result = UnsplashPhoto.model_validate(make_photo("p1")).to_image_result()
        assert result.id == "p1"
        assert result.description == "A cat on a sofa"
        assert result.urls.small == "https://images.unsplash.com/p1?w=400"
        assert result.urls.regular == "https://images.unsplash.com/p1?w=1080"
        assert result.urls.full == "https://images.unsplash.com/p1?full"
        assert result.photographer.name == "Jane Doe"
        assert result.photographer.username == "janedoe"
        assert result.link == "https://unsplash.com/photos/p1"

    def test_description_falls_back_to_alt_description(self):
        """Test a missing description uses the alt text."""
        result = UnsplashPhoto.model_validate(make_photo(description=None)).to_image_result()
        assert result.description == "cat sitting"

    def test_empty_description_falls_back(self):
        """Test an empty description is treated as missing."""
        result = UnsplashPhoto.model_validate(make_photo(description="")).to_image_result()
        assert result.description == "cat sitting"

    def test_description_placeholder(self):
        """Test the placeholder when both description and alt text are absent."""
        photo = make_photo()
        del photo["description"]
        del photo["alt_description"]
        assert UnsplashPhoto.model_validate(photo).to_image_result().description == NO_DESCRIPTION

    @pytest.mark.parametrize("missing", ["urls", "user", "links", "id"])
    def test_missing_required_field_fails_closed(self, missing):
        """Test records without urls/user/links/id are rejected."""
        photo = make_photo()
        del photo[missing]
        with pytest.raises(ValidationError):
            UnsplashPhoto.model_validate(photo)


class TestSearchResponse:
    """Test the response payload."""

    def test_page_defaults_to_requested_page(self):
        """Test the requested page is echoed when the upstream omits it."""
        page = UnsplashSearchPage.model_validate(make_page([make_photo()]))
        response = page.to_search_response(SearchRequest(query="cats", page=3))
        assert response.page == 3
        assert response.query == "cats"

    def test_empty_page(self):
        """Test zero hits produce an explicit empty result list."""
        page = UnsplashSearchPage.model_validate(make_page([]))
        response = page.to_search_response(SearchRequest(query="nothing"))
        assert response.total == 0
        assert response.results == []
        assert json.loads(response.to_text())["results"] == []

    def test_text_round_trip(self):
        """Test the JSON text parses back into the same response."""
        page = UnsplashSearchPage.model_validate(
            make_page([make_photo("p1"), make_photo("p2", description=None, alt_description=None)], total=2)
        )
        response = page.to_search_response(SearchRequest(query="cats"))
        text = response.to_text()
        assert "\n  " in text  # indented
        assert SearchResponse.model_validate_json(text) == response
        assert json.loads(text)["results"][1]["description"] == NO_DESCRIPTION
