"""
Site Content Store - Cloudinary Client Tests

Tests for the sitecontent/media.py module. Validates:
- Configuration detection and accepted image extensions
- Request signing (SHA-1 over sorted parameters + API secret)
- upload_image() against a mocked Cloudinary endpoint: success, HTTP
  errors, transport errors, and malformed responses
"""

import asyncio
import hashlib

import httpx

from sitecontent import media
from tests.conftest import SAMPLE_GIF, SAMPLE_IMAGE_URL


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"secure_url": SAMPLE_IMAGE_URL, "public_id": "hero"})


# ===========================================================================
# Helpers
# ===========================================================================


class TestIsConfigured:
    def test_unconfigured(self, monkeypatch):
        monkeypatch.setattr(media, "CLOUDINARY_CLOUD_NAME", "")
        assert media.is_configured() is False

    def test_missing_secret(self, cloudinary_config, monkeypatch):
        monkeypatch.setattr(media, "CLOUDINARY_API_SECRET", "")
        assert media.is_configured() is False

    def test_configured(self, cloudinary_config):
        assert media.is_configured() is True


class TestAllowedImages:
    def test_accepts_known_extensions(self):
        for name in ("a.jpg", "b.JPEG", "c.png", "d.gif", "e.webp"):
            assert media.is_allowed_image(name), name

    def test_rejects_others(self):
        for name in ("notes.pdf", "script.js", "archive.zip", "noextension", ""):
            assert not media.is_allowed_image(name), name

    def test_allowed_formats_string(self):
        assert media.allowed_formats() == "gif,jpeg,jpg,png,webp"


class TestSignParams:
    def test_matches_manual_sha1(self):
        params = {"timestamp": 1700000000, "folder": "school-website"}
        expected = hashlib.sha1(
            b"folder=school-website&timestamp=1700000000" + b"secret"
        ).hexdigest()
        assert media.sign_params(params, "secret") == expected

    def test_excludes_unsigned_and_empty_params(self):
        params = {
            "timestamp": 1,
            "api_key": "abc",
            "file": "data",
            "resource_type": "image",
            "public_id": "",
        }
        expected = hashlib.sha1(b"timestamp=1" + b"s").hexdigest()
        assert media.sign_params(params, "s") == expected

    def test_secret_changes_signature(self):
        params = {"timestamp": 1}
        assert media.sign_params(params, "a") != media.sign_params(params, "b")


# ===========================================================================
# upload_image
# ===========================================================================


class TestUploadImage:
    def test_not_configured_returns_none(self, monkeypatch, cloudinary_transport):
        monkeypatch.setattr(media, "CLOUDINARY_CLOUD_NAME", "")
        captured = cloudinary_transport(_ok)

        assert asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif")) is None
        assert captured == []

    def test_success_returns_secure_url(self, cloudinary_config, cloudinary_transport):
        captured = cloudinary_transport(_ok)

        url = asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif", "image/gif"))

        assert url == SAMPLE_IMAGE_URL
        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.cloudinary.test/v1_1/demo/image/upload"

    def test_request_is_signed_multipart(self, cloudinary_config, cloudinary_transport):
        captured = cloudinary_transport(_ok)

        asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif", "image/gif"))

        body = captured[0].content
        assert captured[0].headers["content-type"].startswith("multipart/form-data")
        for field in (b'name="api_key"', b'name="signature"', b'name="timestamp"', b'name="folder"'):
            assert field in body
        assert b"school-website" in body
        assert b"123456789012345" in body
        assert b'filename="hero.gif"' in body
        assert SAMPLE_GIF in body

    def test_http_error_status_returns_none(self, cloudinary_config, cloudinary_transport):
        cloudinary_transport(
            lambda request: httpx.Response(401, json={"error": {"message": "Invalid Signature"}})
        )
        assert asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif")) is None

    def test_transport_error_returns_none(self, cloudinary_config, cloudinary_transport):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        cloudinary_transport(boom)
        assert asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif")) is None

    def test_missing_secure_url_returns_none(self, cloudinary_config, cloudinary_transport):
        cloudinary_transport(lambda request: httpx.Response(200, json={"public_id": "x"}))
        assert asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif")) is None

    def test_non_json_response_returns_none(self, cloudinary_config, cloudinary_transport):
        cloudinary_transport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        assert asyncio.run(media.upload_image(SAMPLE_GIF, "hero.gif")) is None
