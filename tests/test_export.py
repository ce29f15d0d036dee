import base64
from io import BytesIO

from PIL import Image

from template_generator.export import DEFAULT_FILENAME, encode_png, png_data_url, save_png
from template_generator.renderer import RenderRequest, render

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def sample_image():
    return render(RenderRequest(width=40, height=30, style="graph", distance=10, size=1))


def test_default_filename():
    assert DEFAULT_FILENAME == "template.png"


def test_encode_png_preserves_pixels():
    image = sample_image()

    data = encode_png(image)

    assert data.startswith(PNG_SIGNATURE)
    decoded = Image.open(BytesIO(data))
    assert decoded.size == (40, 30)
    assert decoded.convert("RGBA").tobytes() == image.tobytes()


def test_png_data_url():
    image = sample_image()

    url = png_data_url(image)

    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]) == encode_png(image)


def test_save_png_creates_parent_directories(tmp_path):
    out = tmp_path / "nested" / "dir" / DEFAULT_FILENAME

    written = save_png(sample_image(), out)

    assert written == out
    assert out.read_bytes().startswith(PNG_SIGNATURE)
    with Image.open(out) as saved:
        assert saved.size == (40, 30)
