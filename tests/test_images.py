"""Tests for base64 and MIME helpers used at the JSON boundary."""

import base64

import pytest

from conftest import make_image
from picplate.utils.images import b64decode_image, b64encode_image, guess_mime_type


@pytest.mark.parametrize("fmt,mime", [("PNG", "image/png"), ("JPEG", "image/jpeg"), ("GIF", "image/gif")])
def test_guess_mime_type(fmt: str, mime: str) -> None:
    assert guess_mime_type(make_image(size=(8, 8), fmt=fmt)) == mime


def test_guess_mime_type_unknown_falls_back() -> None:
    assert guess_mime_type(b"\x00\x01garbage") == "image/jpeg"
    assert guess_mime_type(b"", default="application/octet-stream") == "application/octet-stream"


def test_decode_accepts_data_url() -> None:
    data = make_image(size=(4, 4))
    text = "data:image/png;base64," + b64encode_image(data)

    assert b64decode_image(text) == data
    assert b64decode_image(base64.b64encode(data).decode()) == data


def test_decode_rejects_invalid_base64() -> None:
    with pytest.raises(ValueError):
        b64decode_image("not base64 at all!")
