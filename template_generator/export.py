"""PNG output for rendered templates."""

from __future__ import annotations

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "template.png"


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(image: Image.Image) -> str:
    """Encode ``image`` as a ``data:image/png;base64,...`` URL for download links."""
    payload = base64.b64encode(encode_png(image)).decode("ascii")
    return f"data:image/png;base64,{payload}"


def save_png(image: Image.Image, path: Union[str, Path] = DEFAULT_FILENAME) -> Path:
    """Write ``image`` as PNG, creating parent directories. Returns the path written."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    image.save(out, format="PNG")
    logger.info(f"Wrote: {out.resolve()}")
    return out
