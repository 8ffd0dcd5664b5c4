"""
Site Content Store - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- A fresh SQLite database per test (the module-level DB_PATH is redirected)
- A FastAPI TestClient bound to that database
- Cloudinary credentials and a mock HTTP transport for the media client
- Sample content and image payloads
"""

from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from sitecontent import database, media
from sitecontent.main import create_app

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_CONTENT: Dict[str, str] = {
    "schoolName": "Green Valley Public School",
    "affiliation": "Affiliated to CBSE, New Delhi",
    "address": "12 Orchard Road, Springfield",
    "email": "office@greenvalley.example",
    "phone": "+1 555 0100",
}

# Smallest valid GIF (1x1 transparent pixel)
SAMPLE_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01"
    b"\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)

SAMPLE_IMAGE_URL = (
    "https://res.cloudinary.com/demo/image/upload/v1700000000/school-website/hero.gif"
)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path, monkeypatch) -> Path:
    """Point the database module at a fresh, initialized SQLite file."""
    path = tmp_path / "data" / "content.db"
    monkeypatch.setattr(database, "DB_PATH", path)
    database.init_db()
    return path


@pytest.fixture
def client(db_path: Path) -> TestClient:
    """TestClient for a freshly created app backed by the temp database."""
    return TestClient(create_app())


@pytest.fixture
def sample_content() -> Dict[str, str]:
    return dict(SAMPLE_CONTENT)


# ---------------------------------------------------------------------------
# Cloudinary fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cloudinary_config(monkeypatch) -> Dict[str, str]:
    """Configure fake Cloudinary credentials on the media module."""
    config = {
        "CLOUDINARY_CLOUD_NAME": "demo",
        "CLOUDINARY_API_KEY": "123456789012345",
        "CLOUDINARY_API_SECRET": "test-secret",
        "CLOUDINARY_API_URL": "https://api.cloudinary.test/v1_1",
        "CLOUDINARY_FOLDER": "school-website",
    }
    for name, value in config.items():
        monkeypatch.setattr(media, name, value)
    return config


@pytest.fixture
def cloudinary_transport(monkeypatch) -> Callable[[Callable], list]:
    """
    Factory fixture: call with a request handler to route every
    ``httpx.AsyncClient`` created by the media module through an
    ``httpx.MockTransport``.  Returns the list of captured requests.
    """
    real_async_client = httpx.AsyncClient

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> list:
        captured: list = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return handler(request)

        def client_factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(recording_handler)
            return real_async_client(*args, **kwargs)

        monkeypatch.setattr(media.httpx, "AsyncClient", client_factory)
        return captured

    return _install
