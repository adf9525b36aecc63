import logging
import re
import shutil
from pathlib import Path
from typing import Optional, Tuple
from uuid import uuid4

from fastapi import HTTPException, UploadFile

from ..config import settings

logger = logging.getLogger(__name__)

_safe_bucket = re.compile(r"^[a-zA-Z0-9_\-]+$")

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR).resolve()


def save_entity_image(file: UploadFile, bucket: str, entity_id) -> Tuple[str, str]:
    """
    Saves the image inside: {UPLOAD_DIR}/{bucket}/{entity_id}/<uuid>.<ext>
    Returns (public_url, relative_path).
    """
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="Invalid file")
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {file.content_type}")
    if not _safe_bucket.match(bucket):
        raise HTTPException(status_code=400, detail="Invalid bucket")

    ext = Path(file.filename).suffix.lower()
    rel_dir = Path(bucket) / str(entity_id)
    disk_dir = upload_root() / rel_dir
    disk_dir.mkdir(parents=True, exist_ok=True)

    fname = f"{uuid4().hex}{ext}"
    with (disk_dir / fname).open("wb") as out:
        shutil.copyfileobj(file.file, out)

    relative_path = f"{rel_dir.as_posix()}/{fname}"
    return f"{settings.MEDIA_URL}/{relative_path}", relative_path


def extract_path_from_url(url: Optional[str]) -> Optional[str]:
    """Relative storage path of a public URL issued by save_entity_image."""
    if not url:
        return None
    prefix = f"{settings.MEDIA_URL}/"
    idx = url.find(prefix)
    if idx == -1:
        return None
    return url[idx + len(prefix):]


def delete_stored_file(relative_path: Optional[str]) -> bool:
    if not relative_path:
        return False
    root = upload_root()
    target = (root / relative_path).resolve()
    # Never touch anything outside the upload directory
    if root not in target.parents:
        logger.warning("Refusing to delete file outside upload dir: %s", relative_path)
        return False
    if not target.is_file():
        return False
    target.unlink()
    return True
