# classhub/api/v1/endpoints/uploads.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from classhub.core.config import settings
from classhub.db.session import get_db
from classhub.models.user import User
from classhub.schemas.auth import SuccessResponse
from classhub.schemas.upload import UploadPublic
from classhub.services import classroom_service, upload_service
from classhub.services.transcoder import TranscodeError
from classhub.core.security import get_current_teacher, get_current_user
from classhub.workers.queue import enqueue_classroom_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


def _notify_members(classroom_id: int, upload) -> None:
    if not settings.NOTIFY_ON_UPLOAD:
        return
    try:
        enqueue_classroom_notification(
            classroom_id,
            f"New {upload.type} uploaded: {upload.original_name}",
        )
    except RedisError as e:
        logger.warning("Could not queue notification for classroom %s: %s", classroom_id, e)


@router.get("", response_model=List[UploadPublic])
def list_uploads(
    class_id: Optional[int] = Query(None, alias="classId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return upload_service.list_uploads(db, classroom_id=class_id)


@router.post("", response_model=UploadPublic)
def create_upload(
    file: Optional[UploadFile] = File(None),
    class_id: int = Form(..., alias="classId"),
    upload_type: str = Form(..., alias="type"),
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    """
    Teacher uploads one lecture file or quiz PDF into a classroom.
    Videos are transcoded before they are stored.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    if not classroom_service.get_classroom(db, class_id):
        raise HTTPException(status_code=404, detail="Classroom not found")

    try:
        upload = upload_service.store_upload(
            db,
            teacher=current_teacher,
            classroom_id=class_id,
            upload_type=upload_type,
            fileobj=file.file,
            original_name=file.filename,
            mimetype=file.content_type,
        )
    except upload_service.UploadRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TranscodeError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Video processing failed",
        )
    finally:
        file.file.close()

    _notify_members(class_id, upload)
    return upload


@router.delete("/{upload_id}", response_model=SuccessResponse)
def delete_upload(
    upload_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    upload = upload_service.get_upload(db, upload_id)
    if not upload:
        raise HTTPException(status_code=404, detail="Not found")

    if upload.teacher_id != current_teacher.id:
        raise HTTPException(status_code=403, detail="Not allowed to delete this upload")

    upload_service.delete_upload(db, db_obj=upload)
    return SuccessResponse()
