import importlib
import io
import json
import sys
from types import SimpleNamespace

import pytest
from PIL import Image

from src.attendance_verification.attendance_verification.core.exceptions import NoCodeFound
from src.attendance_verification.attendance_verification.qr import decoder as decoder_module
from src.attendance_verification.attendance_verification.qr.decoder import QRDecoder
from src.attendance_verification.attendance_verification.qr.generator import render_qr_png


def _zbar_available() -> bool:
    try:
        from pyzbar import zbar_library

        zbar_library.load()
    except (ImportError, OSError):
        return False
    return True


needs_zbar = pytest.mark.skipif(not _zbar_available(), reason="zbar shared library not installed")


def _png(mode="L", color=255, size=(64, 64)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


@needs_zbar
def test_decodes_rendered_code():
    payload = json.dumps({"userId": "507f1f77bcf86cd799439011", "type": "attendance"})
    assert QRDecoder().decode(render_qr_png(payload)) == payload


@needs_zbar
def test_decodes_inverted_code():
    assert QRDecoder().decode(render_qr_png("01012345678", inverted=True)) == "01012345678"


@needs_zbar
def test_blank_image_has_no_code():
    with pytest.raises(NoCodeFound):
        QRDecoder().decode(_png())


def test_garbage_bytes_are_rejected():
    with pytest.raises(NoCodeFound):
        QRDecoder().decode(b"definitely not an image")


def test_retries_with_inverted_polarity(monkeypatch):
    calls = []

    def fake_decode(img):
        calls.append(img.getpixel((0, 0)))
        if len(calls) == 2:
            return [SimpleNamespace(data=b" 01012345678 ")]
        return []

    monkeypatch.setattr(decoder_module, "pyzbar_decode", fake_decode)

    assert QRDecoder().decode(_png(color=200)) == "01012345678"
    assert calls == [200, 55]


def test_transparent_pixels_are_flattened_onto_white(monkeypatch):
    seen = []

    def fake_decode(img):
        seen.append((img.mode, img.getpixel((0, 0))))
        return []

    monkeypatch.setattr(decoder_module, "pyzbar_decode", fake_decode)

    with pytest.raises(NoCodeFound):
        QRDecoder().decode(_png(mode="RGBA", color=(0, 0, 0, 0)))
    assert seen[0] == ("L", 255)


def test_decoder_module_loads_without_zbar(monkeypatch):
    # A None entry makes "import pyzbar.pyzbar" fail, as it does without libzbar.
    monkeypatch.setitem(sys.modules, "pyzbar.pyzbar", None)
    importlib.reload(decoder_module)

    with pytest.raises(NoCodeFound):
        decoder_module.QRDecoder().decode(b"not an image")
