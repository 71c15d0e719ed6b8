"""Image upload processing: validate extension, downscale, re-encode, store on disk."""

import io
import logging
import os
import time
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
# Formats Pillow decodes and we re-encode as JPEG; others are stored untouched
COMPRESSIBLE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})


class ImageProcessingError(Exception):
    """Raised when an uploaded image cannot be decoded or has an unsupported type."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


@dataclass(frozen=True)
class ProcessedImage:
    data: bytes
    extension: str


def image_extension(filename: str) -> str:
    """Lower-cased extension of filename; raises ImageProcessingError if not allowed."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ImageProcessingError("Invalid file type")
    return ext


def compress_image(
    content: bytes,
    extension: str,
    max_dimension: int,
    jpeg_quality: int,
) -> ProcessedImage:
    """
    Downscale JPEG/PNG images so neither side exceeds max_dimension, keeping the
    aspect ratio, and re-encode them as JPEG. GIF and WebP pass through as-is.
    """
    if extension not in COMPRESSIBLE_EXTENSIONS:
        return ProcessedImage(data=content, extension=extension)

    try:
        with Image.open(io.BytesIO(content)) as img:
            img.load()
            width, height = img.size
            if width > max_dimension or height > max_dimension:
                if width > height:
                    new_size = (max_dimension, int(height * max_dimension / width))
                else:
                    new_size = (int(width * max_dimension / height), max_dimension)
                img = img.resize(new_size, Image.Resampling.BICUBIC)
            # JPEG has no alpha channel or palette
            if img.mode != "RGB":
                img = img.convert("RGB")
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=jpeg_quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageProcessingError("Failed to process image", cause=e) from e

    return ProcessedImage(data=out.getvalue(), extension=".jpg")


def build_filename(user_id: int, note_id: int, extension: str) -> str:
    """Unique on-disk name: <user>_<note>_<nanoseconds><ext>."""
    return f"{user_id}_{note_id}_{time.time_ns()}{extension}"


def save_image(upload_dir: str, filename: str, data: bytes) -> str:
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, filename)
    with open(path, "wb") as f:
        f.write(data)
    return path


def remove_image_files(upload_dir: str, filenames: list[str]) -> None:
    """Best-effort removal of image files whose rows are already gone."""
    for filename in filenames:
        path = os.path.join(upload_dir, os.path.basename(filename))
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Failed to remove image file %s: %s", path, e)
