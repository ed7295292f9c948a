import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from receiptvault.domain.models import ReceiptImage
from receiptvault.storage.exceptions import ImageLoadError

_CONTENT_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "TIFF": "image/tiff",
    "BMP": "image/bmp",
    "WEBP": "image/webp",
}


def image_from_bytes(data: bytes) -> ReceiptImage:
    """Decode the header of ``data`` to learn its dimensions and type.

    Raises:
        ImageLoadError: if the bytes are not a supported raster image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            image_format = img.format or ""
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(f"Unreadable receipt image: {exc}") from exc
    content_type = _CONTENT_TYPES.get(image_format)
    if content_type is None:
        raise ImageLoadError(f"Unsupported image format '{image_format or 'unknown'}'")
    return ReceiptImage(data=data, width=width, height=height, content_type=content_type)


def load_image(path: Path) -> ReceiptImage:
    """Read a receipt image from disk.

    Raises:
        ImageLoadError: if the file is missing or not a supported image.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ImageLoadError(f"Cannot read image {path}: {exc}") from exc
    return image_from_bytes(data)
