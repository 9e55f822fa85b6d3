import io

from PIL import Image

from brandboost.schemas import DownloadFormat
from brandboost.services.download import convert_for_download, download_filename
from brandboost.services.data_uri import encode_data_uri

from conftest import make_png


def test_png_is_pass_through(png_bytes):
    content, media_type = convert_for_download(encode_data_uri(png_bytes, "image/png"), DownloadFormat.PNG)

    assert content == png_bytes
    assert media_type == "image/png"


def test_jpeg_has_opaque_white_background():
    transparent = make_png(size=(4, 4), color=(255, 0, 0, 0))
    content, media_type = convert_for_download(encode_data_uri(transparent, "image/png"), DownloadFormat.JPEG)

    assert media_type == "image/jpeg"
    with Image.open(io.BytesIO(content)) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"
        r, g, b = image.getpixel((1, 1))
        assert min(r, g, b) > 245


def test_jpeg_keeps_opaque_pixels():
    opaque = make_png(size=(4, 4), color=(0, 0, 0, 255))
    content, _ = convert_for_download(encode_data_uri(opaque, "image/png"), "jpeg")

    with Image.open(io.BytesIO(content)) as image:
        assert max(image.getpixel((1, 1))) < 10


def test_filename_uses_business_name():
    assert download_filename("Creative Inc.", DownloadFormat.PNG) == "Creative Inc.-asset.png"
    assert download_filename("Creative Inc.", DownloadFormat.JPEG) == "Creative Inc.-asset.jpeg"


def test_filename_falls_back_and_strips_separators():
    assert download_filename("", DownloadFormat.PNG) == "brandboost-asset.png"
    assert download_filename(None, DownloadFormat.JPEG) == "brandboost-asset.jpeg"
    assert download_filename("A/B", DownloadFormat.PNG) == "A_B-asset.png"


def test_png_download_reencodes_other_sources():
    webp = io.BytesIO()
    Image.new("RGBA", (4, 4), (10, 20, 30, 255)).save(webp, format="WEBP")

    content, media_type = convert_for_download(encode_data_uri(webp.getvalue(), "image/webp"), DownloadFormat.PNG)

    assert media_type == "image/png"
    assert content.startswith(b"\x89PNG\r\n\x1a\n")
    with Image.open(io.BytesIO(content)) as image:
        assert image.size == (4, 4)
