"""
QR encoding collaborator.

Turns a public URL into a PNG data URL. Pure function, no persistence:
the QR code service decides what to store.
"""

import base64
import io
from dataclasses import dataclass
from typing import Protocol

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.image.pil import PilImage
from PIL import Image

from shared.config.settings import get_settings

ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


@dataclass(frozen=True)
class QROptions:
    """Rendering options for a QR image."""

    size: int = 300
    margin: int = 2
    dark: str = "#000000"
    light: str = "#FFFFFF"
    error_correction: str = "M"

    @classmethod
    def from_settings(cls) -> "QROptions":
        s = get_settings()
        return cls(
            size=s.qr_size,
            margin=s.qr_margin,
            dark=s.qr_dark_color,
            light=s.qr_light_color,
            error_correction=s.qr_error_correction.upper(),
        )


class Encoder(Protocol):
    """Anything able to encode text into an image data URL."""

    def encode(self, text: str, options: QROptions) -> str: ...


class QREncoder:
    """QR encoder backed by the qrcode library and Pillow."""

    def encode(self, text: str, options: QROptions) -> str:
        if not text:
            raise ValueError("Cannot encode an empty string")
        if options.size <= 0 or options.margin < 0:
            raise ValueError(f"Invalid QR options: size={options.size} margin={options.margin}")
        if options.error_correction not in ERROR_CORRECTION:
            raise ValueError(f"Invalid QR error correction: {options.error_correction}")

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION[options.error_correction],
            border=options.margin,
        )
        qr.add_data(text)
        qr.make(fit=True)

        # Pick the largest box size that fits the requested width
        total_modules = qr.modules_count + 2 * options.margin
        qr.box_size = max(1, options.size // total_modules)

        img = qr.make_image(
            image_factory=PilImage,
            fill_color=options.dark,
            back_color=options.light,
        )
        pil_image = img.get_image()
        if pil_image.size != (options.size, options.size):
            pil_image = pil_image.resize((options.size, options.size), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        pil_image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
