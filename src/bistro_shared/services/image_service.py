"""
Local storage for uploaded menu images.

Files are written under the configured upload folder with a random name and
served by the API from ``/uploads/<name>``.
"""

from __future__ import annotations

import uuid
from pathlib import Path

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from bistro_shared.constants import ALLOWED_IMAGE_EXTENSIONS
from bistro_shared.errors import ValidationError
from bistro_shared.logging_config import get_logger

logger = get_logger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"


class ImageStore:
    def __init__(self, upload_folder: str | Path):
        self.root = Path(upload_folder)

    def save(self, file: FileStorage) -> str:
        """
        Store an uploaded image and return its public path.

        Raises:
            ValidationError: Missing file name or unsupported extension
        """
        if not file or not file.filename:
            raise ValidationError("Empty file name")

        safe_filename = secure_filename(file.filename)
        file_ext = safe_filename.rsplit(".", 1)[1].lower() if "." in safe_filename else ""
        if file_ext not in ALLOWED_IMAGE_EXTENSIONS:
            allowed = ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
            raise ValidationError(f"Unsupported image format. Use: {allowed}")

        self.root.mkdir(parents=True, exist_ok=True)
        new_filename = f"menu_{uuid.uuid4().hex}.{file_ext}"
        file.save(str(self.root / new_filename))
        logger.info("Stored menu image %s", new_filename)
        return f"{UPLOAD_URL_PREFIX}{new_filename}"

    def resolve(self, filename: str) -> Path | None:
        """Path of a stored file, or None if the name escapes the folder."""
        safe = secure_filename(filename)
        if not safe or safe != filename:
            return None
        return self.root / safe

    def delete(self, image: str | None) -> bool:
        """Remove a previously stored image. External URLs are left alone."""
        if not image or not image.startswith(UPLOAD_URL_PREFIX):
            return False
        path = self.resolve(image[len(UPLOAD_URL_PREFIX):])
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not delete image %s: %s", path, exc)
            return False
        logger.info("Deleted menu image %s", path.name)
        return True
