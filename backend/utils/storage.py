# backend/utils/storage.py
import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from config import settings
from utils.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


@dataclass
class StoredFile:
    filename: str
    path: Path


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve(filename: str) -> Path:
    """Path of a stored file; names carrying directory parts are refused."""
    if not filename or Path(filename).name != filename or filename in {".", ".."}:
        raise ValidationError("Invalid image name")
    return upload_dir() / filename


def check_uploads(files: List, max_count: int) -> None:
    if len(files) > max_count:
        raise ValidationError(f"At most {max_count} images are allowed")
    for upload in files:
        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Invalid file type")


def save_upload(upload) -> StoredFile:
    """Write an uploaded file under a fresh unique name."""
    ext = _EXTENSIONS.get(upload.content_type)
    if ext is None and upload.filename and "." in upload.filename:
        ext = upload.filename.rsplit(".", 1)[-1].lower()
    unique_filename = f"{uuid.uuid4().hex}.{ext or 'bin'}"
    save_path = upload_dir() / unique_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)
    except OSError as e:
        raise StorageError(f"File save error: {e}") from e
    finally:
        upload.file.close()
    return StoredFile(filename=unique_filename, path=save_path)


def delete_file(filename: str) -> bool:
    """Best-effort removal; returns True when a file was deleted."""
    try:
        path = resolve(filename)
    except ValidationError:
        logger.warning(f"Refusing to delete suspicious image name {filename!r}")
        return False
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        logger.error(f"Could not delete {path}: {e}")
        return False
    return True


def delete_files(filenames: Iterable[str]) -> None:
    # Each deletion is independent, one failure never stops the rest
    for filename in filenames:
        delete_file(filename)
