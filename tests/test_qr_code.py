import base64
import io

import pytest
from PIL import Image, ImageOps

from otpauth.qr_code import (
    qr_code_data_url,
    save_otp_qr_code_file,
    save_qr_code_file,
    write_otp_qr_code_stream,
    write_qr_code_stream,
)

from tests.conftest import RFC_SECRET

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_write_stream():
    buffer = io.BytesIO()
    write_qr_code_stream("otpauth://totp/alice?secret=" + RFC_SECRET, buffer, 240, 240)
    data = buffer.getvalue()
    assert data.startswith(PNG_MAGIC)
    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (240, 240)


def test_write_otp_stream_default_size():
    buffer = io.BytesIO()
    write_otp_qr_code_stream("alice", RFC_SECRET, buffer)
    with Image.open(io.BytesIO(buffer.getvalue())) as img:
        assert img.size == (200, 200)


def test_save_file(tmp_path):
    target = tmp_path / "qr.png"
    path = save_otp_qr_code_file("alice", RFC_SECRET, str(target), 300, 150)
    assert path == str(target)
    with Image.open(path) as img:
        assert img.format == "PNG"
        assert img.size == (300, 150)


def test_save_file_never_overwrites(tmp_path):
    target = tmp_path / "qr.png"
    target.write_bytes(b"keep me")
    with pytest.raises(FileExistsError):
        save_qr_code_file("hello", str(target))
    assert target.read_bytes() == b"keep me"


@pytest.mark.parametrize("text", ["", None])
def test_empty_text(text, tmp_path):
    with pytest.raises(ValueError):
        write_qr_code_stream(text, io.BytesIO())
    with pytest.raises(ValueError):
        save_qr_code_file(text, str(tmp_path / "x.png"))


def test_missing_target():
    with pytest.raises(ValueError):
        write_qr_code_stream("hello", None)
    with pytest.raises(ValueError):
        save_qr_code_file("hello", "")


def test_bad_size():
    with pytest.raises(ValueError):
        write_qr_code_stream("hello", io.BytesIO(), 0, 100)


def test_data_url():
    url = qr_code_data_url("hello")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]).startswith(PNG_MAGIC)


def _dark_bbox(img):
    """Bounding box of the black modules."""
    return ImageOps.invert(img.convert("L")).getbbox()


@pytest.mark.parametrize("size", [(300, 150), (150, 300), (200, 200)])
def test_symbol_stays_square(size):
    buffer = io.BytesIO()
    write_qr_code_stream("otpauth://totp/alice?secret=" + RFC_SECRET, buffer, *size)
    with Image.open(io.BytesIO(buffer.getvalue())) as img:
        assert img.size == size
        left, top, right, bottom = _dark_bbox(img)
    assert right - left == bottom - top


def test_modules_have_whole_pixel_size():
    buffer = io.BytesIO()
    write_qr_code_stream("hello", buffer, 205, 205)
    with Image.open(io.BytesIO(buffer.getvalue())) as img:
        left, top, right, bottom = _dark_bbox(img)
        # version 1 symbol: 21 modules across
        assert (right - left) % 21 == 0
        scale = (right - left) // 21
        # top-left finder pattern is a solid 7-module square outline
        row = [img.getpixel((x, top)) for x in range(left, left + 7 * scale)]
    assert all(px == (0, 0, 0) for px in row)


def test_too_small_for_content():
    with pytest.raises(ValueError, match="too small"):
        write_qr_code_stream("otpauth://totp/alice?secret=" + RFC_SECRET, io.BytesIO(), 20, 20)
