from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.exceptions import NoCodeFound

logger = logging.getLogger(__name__)


def pyzbar_decode(image: Image.Image) -> list:
    """QR symbols pyzbar finds in ``image``.

    pyzbar loads the zbar shared library when it is imported, so the import
    happens on first decode rather than when the app is wired.
    """
    from pyzbar.pyzbar import ZBarSymbol, decode

    return decode(image, symbols=[ZBarSymbol.QRCODE])


def _to_greyscale(img: Image.Image) -> Image.Image:
    if img.mode in ("RGBA", "LA", "P"):
        # Transparent pixels would turn black; flatten onto white first.
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        img = Image.alpha_composite(background, rgba)
    return img.convert("L")


class QRDecoder:
    """Find a QR code in an uploaded photo and return its text.

    The image is scanned as-is and then with inverted polarity, so light-on-dark
    codes (phone screens in dark mode, negative prints) decode too. CPU-bound
    and stateless; one call per request.
    """

    def decode(self, image_bytes: bytes) -> str:
        try:
            img = Image.open(io.BytesIO(image_bytes))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise NoCodeFound("Invalid image") from e

        grey = _to_greyscale(ImageOps.exif_transpose(img))
        for polarity, candidate in (("normal", grey), ("inverted", ImageOps.invert(grey))):
            symbols = pyzbar_decode(candidate)
            if symbols:
                logger.debug("QR code found (%s polarity)", polarity)
                return symbols[0].data.decode("utf-8", errors="replace").strip()

        raise NoCodeFound()
