"""On-disk storage for post images and the upload validation policy."""
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from errors import InternalError, ValidationError
from logger import get_logger

logger = get_logger("storage")

MAX_IMAGE_BYTES = 5 * 1024 * 1024

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}


@dataclass(frozen=True)
class ImageUpload:
    """A validated image payload ready to be stored"""
    data: bytes
    mime_type: str


def validate_image(data: bytes, mime_type: Optional[str]) -> ImageUpload:
    """Apply the allow-list and size limit to an image payload"""
    mime_type = (mime_type or "").split(";")[0].strip().lower()
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Only JPEG, PNG and GIF images are allowed")
    if not data:
        raise ValidationError("Image file is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError(f"Image too large. Max size: {MAX_IMAGE_BYTES} bytes")
    return ImageUpload(data=data, mime_type=mime_type)


def read_image_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    """Read and validate the optional imageFile part of a multipart request"""
    if upload is None or not upload.filename:
        return None
    # read one byte past the limit so oversized files are detected without loading them whole
    data = upload.file.read(MAX_IMAGE_BYTES + 1)
    return validate_image(data, upload.content_type)


class ImageStore:
    """Store image files on the local filesystem under uuid-based names."""

    def __init__(self, base_path: str = "uploads"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path(self, filename: str) -> Path:
        # filenames are generated by save(); never join client-supplied paths
        return self.base_path / Path(filename).name

    def save(self, image: ImageUpload) -> str:
        filename = f"{uuid.uuid4().hex}{ALLOWED_IMAGE_TYPES[image.mime_type]}"
        try:
            self.path(filename).write_bytes(image.data)
        except OSError as exc:
            logger.exception("Unable to write image %s", filename)
            raise InternalError("Unable to store image") from exc
        logger.debug("Stored image %s (%d bytes)", filename, len(image.data))
        return filename

    def delete(self, filename: Optional[str]) -> bool:
        if not filename:
            return False
        path = self.path(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("Unable to delete image %s", filename)
            return False
        logger.debug("Deleted image %s", filename)
        return True
