# classhub/services/upload_service.py
import logging
import os
import re
import shutil
import time
from pathlib import Path
from typing import BinaryIO, List, Optional

from sqlalchemy.orm import Session

from classhub.core.config import settings
from classhub.models.upload import Upload
from classhub.models.user import User
from classhub.services import transcoder

logger = logging.getLogger(__name__)

MB = 1024 * 1024
UPLOAD_TYPES = ("lecture", "quiz")
PDF_MIMETYPE = "application/pdf"


class UploadRejected(Exception):
    """The file breaks the size/type policy for its declared upload type."""


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def is_video(mimetype: str) -> bool:
    return mimetype.startswith("video/")


def validate_upload(upload_type: str, mimetype: str, size: int) -> None:
    """
    lecture: videos up to MAX_VIDEO_MB, anything else up to MAX_FILE_MB.
    quiz: PDF only, up to MAX_FILE_MB.
    Limits are inclusive.
    """
    if upload_type == "lecture":
        if is_video(mimetype):
            if size > settings.MAX_VIDEO_MB * MB:
                raise UploadRejected(f"Video exceeds {settings.MAX_VIDEO_MB}MB limit")
        elif size > settings.MAX_FILE_MB * MB:
            raise UploadRejected(f"File exceeds {settings.MAX_FILE_MB}MB limit")
    elif upload_type == "quiz":
        if mimetype != PDF_MIMETYPE or size > settings.MAX_FILE_MB * MB:
            raise UploadRejected(f"Only PDFs ≤{settings.MAX_FILE_MB}MB allowed")
    else:
        raise UploadRejected("Upload type must be 'lecture' or 'quiz'")


def safe_name(original_name: str) -> str:
    name = os.path.basename(original_name.replace("\\", "/"))
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "file"


def stored_name(original_name: str) -> str:
    return f"{int(time.time() * 1000)}-{safe_name(original_name)}"


def public_url(filename: str) -> str:
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{filename}"


def save_incoming(fileobj: BinaryIO, filename: str) -> Path:
    path = upload_dir() / filename
    with open(path, "wb") as buffer:
        shutil.copyfileobj(fileobj, buffer)
    return path


def remove_file(path: Path) -> bool:
    """Delete a stored file; a file that is already gone is not an error."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False


def store_upload(
    db: Session,
    *,
    teacher: User,
    classroom_id: int,
    upload_type: str,
    fileobj: BinaryIO,
    original_name: str,
    mimetype: str,
) -> Upload:
    """
    validate -> (transcode) -> persist.

    The raw file is written to UPLOAD_DIR first so its size can be measured;
    it is removed again when validation or transcoding fails. Nothing is
    written to the database unless every earlier step succeeded.
    """
    mimetype = mimetype or "application/octet-stream"
    filename = stored_name(original_name)
    raw_path = save_incoming(fileobj, filename)
    size = raw_path.stat().st_size

    try:
        validate_upload(upload_type, mimetype, size)
    except UploadRejected:
        remove_file(raw_path)
        raise

    final_name = filename
    if is_video(mimetype):
        final_name = f"compressed-{filename}"
        try:
            transcoder.transcode_video(raw_path, upload_dir() / final_name)
        except transcoder.TranscodeError:
            logger.error("Transcoding failed for %s", original_name, exc_info=True)
            remove_file(raw_path)
            raise
        remove_file(raw_path)

    upload = Upload(
        classroom_id=classroom_id,
        teacher_id=teacher.id,
        filename=final_name,
        original_name=original_name,
        mimetype=mimetype,
        size=size,
        url=public_url(final_name),
        type=upload_type,
    )
    db.add(upload)
    try:
        db.commit()
    except Exception:
        db.rollback()
        remove_file(upload_dir() / final_name)
        raise
    db.refresh(upload)

    logger.info(
        "Stored upload %s (%s, %d bytes) for classroom %s",
        upload.id, mimetype, size, classroom_id,
    )
    return upload


def get_upload(db: Session, upload_id: int) -> Optional[Upload]:
    return db.query(Upload).get(upload_id)


def list_uploads(db: Session, *, classroom_id: int | None = None) -> List[Upload]:
    query = db.query(Upload)
    if classroom_id is not None:
        query = query.filter(Upload.classroom_id == classroom_id)
    return query.order_by(Upload.created_at.desc(), Upload.id.desc()).all()


def delete_upload(db: Session, *, db_obj: Upload) -> None:
    removed = remove_file(upload_dir() / db_obj.filename)
    if not removed:
        logger.warning("Backing file for upload %s was already missing", db_obj.id)
    db.delete(db_obj)
    db.commit()
