"""Shared fixtures: a fake requests session standing in for the Unsplash API."""

import json

import pytest
import requests

from search_image_tool.unsplash import UnsplashClient


def make_photo(photo_id="abc123", description="A cat on a sofa", alt_description="cat sitting", **overrides):
    photo = {
        "id": photo_id,
        "description": description,
        "alt_description": alt_description,
        "width": 4000,
        "height": 3000,
        "color": "#262626",
        "urls": {
            "raw": f"https://images.unsplash.com/{photo_id}?raw",
            "full": f"https://images.unsplash.com/{photo_id}?full",
            "regular": f"https://images.unsplash.com/{photo_id}?w=1080",
            "small": f"https://images.unsplash.com/{photo_id}?w=400",
            "thumb": f"https://images.unsplash.com/{photo_id}?w=200",
        },
        "user": {"name": "Jane Doe", "username": "janedoe", "links": {"html": "https://unsplash.com/@janedoe"}},
        "links": {
            "self": f"https://api.unsplash.com/photos/{photo_id}",
            "html": f"https://unsplash.com/photos/{photo_id}",
            "download": f"https://unsplash.com/photos/{photo_id}/download",
        },
    }
    photo.update(overrides)
    return photo


def make_page(photos=None, total=None, total_pages=None):
    photos = photos if photos is not None else []
    return {
        "total": len(photos) if total is None else total,
        "total_pages": (1 if photos else 0) if total_pages is None else total_pages,
        "results": photos,
    }


def make_response(status_code=200, payload=None, reason="OK", body=None):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        body = json.dumps(payload).encode() if payload is not None else b""
    response._content = body
    response.headers["Content-Type"] = "application/json"
    return response


class FakeSession:
    """Records every GET and answers with a canned response or raises a canned error."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else make_response(payload=make_page())
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_session():
    return FakeSession(make_response(payload=make_page([make_photo("p1"), make_photo("p2", description=None)], total=42, total_pages=5)))


@pytest.fixture
def client(fake_session):
    return UnsplashClient(access_key="test-key", session=fake_session)
