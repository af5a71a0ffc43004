"""Tests for payment evidence validation."""

import base64

import pytest

from app.core.exceptions import ValidationError
from app.services.evidence_service import EvidenceService


def data_url(mime: str, content: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


@pytest.fixture
def service():
    return EvidenceService(max_bytes=1024 * 1024)


@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_evidence_is_none(service, value):
    assert service.validate(value) is None


def test_valid_png(service, png_data_url):
    assert service.validate(f"  {png_data_url}\n") == png_data_url


def test_decode_returns_mime_and_bytes(service, png_data_url):
    mime, content = service.decode(png_data_url)

    assert mime == "image/png"
    assert content.startswith(b"\x89PNG")


def test_valid_pdf(service):
    url = data_url("application/pdf", b"%PDF-1.4\n%%EOF")

    assert service.validate(url) == url


def test_not_a_data_url(service):
    with pytest.raises(ValidationError, match="data URL"):
        service.validate("https://example.com/receipt.png")


def test_invalid_base64(service):
    with pytest.raises(ValidationError, match="base64"):
        service.validate("data:image/png;base64,@@@not-base64@@@")


def test_unsupported_type(service):
    with pytest.raises(ValidationError, match="Unsupported"):
        service.validate(data_url("text/plain", b"paid in full"))


def test_too_large(png_data_url):
    with pytest.raises(ValidationError, match="File size exceeds"):
        EvidenceService(max_bytes=10).validate(png_data_url)


def test_unreadable_image(service):
    with pytest.raises(ValidationError, match="readable image"):
        service.validate(data_url("image/png", b"definitely not a png"))


def test_fake_pdf(service):
    with pytest.raises(ValidationError, match="PDF"):
        service.validate(data_url("application/pdf", b"GIF89a..."))
