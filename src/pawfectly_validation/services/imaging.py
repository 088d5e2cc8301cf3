"""Thin Pillow wrapper that normalizes uploads before storage."""

import io
import warnings
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from pawfectly_validation.errors import InvalidMediaType

MAX_LONG_EDGE = 512
JPEG_QUALITY = 82


@dataclass(frozen=True)
class NormalizedImage:
    """Re-encoded JPEG bytes with their final dimensions."""

    content: bytes
    width: int
    height: int


def validate_mime_type(mime_type: str | None) -> None:
    """Reject declared MIME types that do not describe an image."""
    if mime_type is None:
        return
    normalized = mime_type.strip().lower()
    if normalized != "image" and not normalized.startswith("image/"):
        raise InvalidMediaType(
            f"File must be an image. Received MIME type: {mime_type}"
        )


def target_size(
    width: int, height: int, max_edge: int = MAX_LONG_EDGE
) -> tuple[int, int]:
    """Return dimensions with the longest edge capped at ``max_edge``."""
    long_edge = max(width, height)
    if long_edge <= max_edge:
        return width, height
    scale = max_edge / long_edge
    return max(1, round(width * scale)), max(1, round(height * scale))


def normalize_image(content: bytes) -> NormalizedImage:
    """Downscale oversize images and re-encode everything as JPEG.

    Images past Pillow's decompression-bomb pixel limit are rejected as
    invalid media, including those that would only trigger its warning.
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(content)) as source:
                image = ImageOps.exif_transpose(source)
                width, height = target_size(*image.size)
                if (width, height) != image.size:
                    image = image.resize((width, height), Image.Resampling.LANCZOS)
                if image.mode != "RGB":
                    image = image.convert("RGB")
                out = io.BytesIO()
                image.save(out, format="JPEG", quality=JPEG_QUALITY, optimize=True)
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as exc:
        raise InvalidMediaType("Image dimensions exceed the allowed size") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidMediaType("File could not be decoded as an image") from exc
    return NormalizedImage(content=out.getvalue(), width=width, height=height)
