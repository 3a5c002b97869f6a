"""
qr_code.py — Render text (usually an otpauth URI) as a PNG QR code.

Uses the `qrcode` package with its Pillow backend and fits the symbol into
the requested pixel size: each module gets the same whole number of pixels
and the symbol stays square, centred on a white background.
"""

import base64
import io
import logging
import os

import qrcode
from PIL import Image

from otpauth.otpauth_uri import get_otp_auth_url

logger = logging.getLogger(__name__)

QRCODE_IMAGE_FORMAT = "PNG"
DEFAULT_WIDTH = 200
DEFAULT_HEIGHT = 200
QR_BORDER = 1              # quiet zone, in modules


def _render(text: str, width: int, height: int) -> Image.Image:
    if not text:
        raise ValueError("QR code text can't be empty")
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid QR code size {width}x{height}")

    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        border=QR_BORDER,
    )
    qr.add_data(text.encode("utf-8"))
    qr.make(fit=True)

    # whole pixels per module, square symbol centred on a white canvas
    modules = qr.modules_count + 2 * QR_BORDER
    qr.box_size = min(width, height) // modules
    if qr.box_size < 1:
        raise ValueError(f"QR code size {width}x{height} too small, needs at least {modules}px")

    symbol = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    canvas = Image.new("RGB", (width, height), "white")
    canvas.paste(symbol, ((width - symbol.width) // 2, (height - symbol.height) // 2))
    return canvas


def write_qr_code_stream(text: str, stream, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
    """
    Write a PNG QR code for ``text`` into a binary stream.

    Raises:
        ValueError: empty text, missing stream or bad size
    """
    if stream is None:
        raise ValueError("QR code stream can't be None")
    _render(text, width, height).save(stream, format=QRCODE_IMAGE_FORMAT)


def save_qr_code_file(text: str, file_path: str, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> str:
    """
    Save a PNG QR code for ``text`` to ``file_path``.

    An existing file is never overwritten.

    Returns:
        str: absolute path of the written file

    Raises:
        ValueError: empty text / path or bad size
        FileExistsError: ``file_path`` already exists
    """
    if not file_path:
        raise ValueError("QR code file path can't be empty")

    path = os.path.abspath(file_path)
    img = _render(text, width, height)
    # "xb" fails atomically if the file appeared in the meantime
    with open(path, "xb") as f:
        img.save(f, format=QRCODE_IMAGE_FORMAT)
    logger.info("Saved QR code image to %s", path)
    return path


def qr_code_data_url(text: str, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> str:
    """PNG QR code as a data: URL, for embedding in JSON responses."""
    buffer = io.BytesIO()
    write_qr_code_stream(text, buffer, width, height)
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def save_otp_qr_code_file(name: str, secret: str, file_path: str,
                          width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> str:
    return save_qr_code_file(get_otp_auth_url(name, secret), file_path, width, height)


def write_otp_qr_code_stream(name: str, secret: str, stream,
                             width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
    write_qr_code_stream(get_otp_auth_url(name, secret), stream, width, height)
