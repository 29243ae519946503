"""Image loading and transcoding for upload.

Contains the image helpers used by the orchestrator:
- ImageHandle: The uploaded image (raw bytes plus where it came from)
- EncodedImage: The JPEG re-encoding sent to the analysis model
- load_image: Read an image file into an ImageHandle
- encode_for_upload: Transcode an ImageHandle to JPEG
- decode_data_uri: Split a data URI into mime type and bytes
"""

import base64
import binascii
import io
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from infrareport.exceptions import ConversionError, ValidationError

DEFAULT_JPEG_QUALITY = 80

# Shown when the visualization step cannot produce an image
PLACEHOLDER_IMAGE_URI = (
    "data:image/svg+xml;base64,"
    "PHN2ZyB3aWR0aD0iNTEyIiBoZWlnaHQ9IjUxMiIgeG1sbnM9Imh0dHA6Ly93d3cudzMub3JnLzIwMDAvc3ZnIj4K"
    "ICA8cmVjdCB3aWR0aD0iNTEyIiBoZWlnaHQ9IjUxMiIgZmlsbD0iI2Y3ZjhmOSIvPgogIDx0ZXh0IHg9IjUwJSIg"
    "eT0iNDAlIiBmb250LWZhbWlseT0iQXJpYWwsIHNhbnMtc2VyaWYiIGZvbnQtc2l6ZT0iMjQiIGZpbGw9IiM2Yjcz"
    "ODAiIHRleHQtYW5jaG9yPSJtaWRkbGUiPgogICAgUmVzdG9yZWQgU3RydWN0dXJlCiAgPC90ZXh0PgogIDx0ZXh0"
    "IHg9IjUwJSIgeT0iNjAlIiBmb250LWZhbWlseT0iQXJpYWwsIHNhbnMtc2VyaWYiIGZvbnQtc2l6ZT0iMTYiIGZp"
    "bGw9IiM5Y2EzYWYiIHRleHQtYW5jaG9yPSJtaWRkbGUiPgogICAgVmlzdWFsaXphdGlvbgogIDwvdGV4dD4KPC9z"
    "dmc+"
)


@dataclass(frozen=True)
class ImageHandle:
    """An uploaded image."""

    data: bytes
    source: str
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True)
class EncodedImage:
    """An image in the encoding accepted by the analysis model."""

    data: bytes
    mime_type: str = "image/jpeg"

    def as_base64(self) -> str:
        """Return the image as a base64 string (no data URI prefix)."""
        return base64.b64encode(self.data).decode("ascii")

    def as_data_uri(self) -> str:
        """Return the image as a data URI."""
        return f"data:{self.mime_type};base64,{self.as_base64()}"


def load_image(path: Path) -> ImageHandle:
    """Read an image file.

    Args:
        path: Path to the image.

    Returns:
        An ImageHandle with the raw file bytes.

    Raises:
        ValidationError: If the file is not an image type.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(f"Unsupported file type: {path.name} (detected {mime_type})")

    return ImageHandle(data=path.read_bytes(), source=str(path), mime_type=mime_type)


def encode_for_upload(handle: ImageHandle, quality: int = DEFAULT_JPEG_QUALITY) -> EncodedImage:
    """Transcode an uploaded image to JPEG.

    Transparent images are flattened onto a white background.

    Args:
        handle: The uploaded image.
        quality: JPEG quality (1-95).

    Returns:
        The JPEG re-encoding.

    Raises:
        ConversionError: If the image cannot be decoded or encoded.
    """
    try:
        with Image.open(io.BytesIO(handle.data)) as img:
            img.load()
            if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                flattened = Image.new("RGB", rgba.size, (255, 255, 255))
                flattened.paste(rgba, mask=rgba.getchannel("A"))
            else:
                flattened = img.convert("RGB")

            buffer = io.BytesIO()
            flattened.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ConversionError(f"Could not convert image {handle.source}: {e}")

    return EncodedImage(data=buffer.getvalue(), mime_type="image/jpeg")


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI.

    Args:
        uri: A "data:<mime>;base64,<payload>" string.

    Returns:
        Tuple of (mime type, decoded bytes).

    Raises:
        ValueError: If the URI is not a base64 data URI.
    """
    if not uri.startswith("data:") or ";base64," not in uri:
        raise ValueError("Not a base64 data URI")

    header, payload = uri[len("data:"):].split(";base64,", 1)
    try:
        return header, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}")
