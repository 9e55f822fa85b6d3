import io
from typing import Optional, Tuple

from PIL import Image, ImageColor

from ..config import DEFAULT_DOWNLOAD_NAME, DOWNLOAD_SUFFIX, JPEG_BACKGROUND, JPEG_QUALITY
from ..schemas import DownloadFormat
from .data_uri import parse_data_uri

# Characters that cannot appear in a saved file name.
_UNSAFE_FILENAME_CHARS = '/\\:*?"<>|'


def flatten_to_jpeg(image_data: bytes, background: str = JPEG_BACKGROUND, quality: int = JPEG_QUALITY) -> bytes:
    """
    Paint the image onto an opaque canvas of ``background`` and encode it as JPEG.

    Transparent and semi-transparent pixels are composited over the fill, so
    the result never depends on how a viewer renders missing alpha.
    """
    with Image.open(io.BytesIO(image_data)) as image:
        image = image.convert("RGBA")
        canvas = Image.new("RGB", image.size, ImageColor.getrgb(background))
        canvas.paste(image, mask=image.split()[3])

    out = io.BytesIO()
    canvas.save(out, format="JPEG", quality=quality)
    return out.getvalue()


def reencode_to_png(image_data: bytes) -> bytes:
    with Image.open(io.BytesIO(image_data)) as image:
        out = io.BytesIO()
        image.save(out, format="PNG")
    return out.getvalue()


def convert_for_download(data_uri: str, fmt: DownloadFormat) -> Tuple[bytes, str]:
    """
    Return ``(bytes, media_type)`` for the chosen download format.

    PNG sources are passed through untouched; other sources are re-encoded so
    the bytes always match the ``.png`` name.
    """
    parsed = parse_data_uri(data_uri)
    if DownloadFormat(fmt) is DownloadFormat.JPEG:
        return flatten_to_jpeg(parsed.data), "image/jpeg"
    if parsed.mime_type == "image/png":
        return parsed.data, parsed.mime_type
    return reencode_to_png(parsed.data), "image/png"


def download_filename(business_name: Optional[str], fmt: DownloadFormat) -> str:
    base = (business_name or "").strip() or DEFAULT_DOWNLOAD_NAME
    base = "".join("_" if ch in _UNSAFE_FILENAME_CHARS else ch for ch in base)
    return f"{base}{DOWNLOAD_SUFFIX}.{DownloadFormat(fmt).value}"
