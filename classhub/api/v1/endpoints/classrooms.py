# classhub/api/v1/endpoints/classrooms.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from classhub.db.session import get_db
from classhub.models.user import User
from classhub.schemas.auth import SuccessResponse
from classhub.schemas.classroom import (
    ClassroomCreate,
    ClassroomPublic,
    JoinByCodeRequest,
    JoinByCodeResponse,
)
from classhub.schemas.message import MessagePublic
from classhub.schemas.user import MemberPublic
from classhub.services import chat_service, classroom_service
from classhub.core.security import get_current_teacher, get_current_user

router = APIRouter(tags=["classrooms"])


def _get_classroom_or_404(db: Session, classroom_id: int):
    classroom = classroom_service.get_classroom(db, classroom_id)
    if not classroom:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Classroom not found",
        )
    return classroom


@router.post("/classrooms", response_model=ClassroomPublic)
def create_classroom(
    obj_in: ClassroomCreate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    try:
        return classroom_service.create_classroom(db, teacher=current_teacher, name=obj_in.name)
    except classroom_service.ClassroomError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# declared before /classrooms/{classroom_id} so "mine" is not parsed as an id
@router.get("/classrooms/mine", response_model=List[ClassroomPublic])
def list_my_classrooms(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return classroom_service.list_classrooms_for_user(db, user=current_user)


@router.get("/classrooms/{classroom_id}", response_model=ClassroomPublic)
def get_classroom(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_classroom_or_404(db, classroom_id)


@router.post("/classrooms/{classroom_id}/join", response_model=SuccessResponse)
def join_classroom(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _get_classroom_or_404(db, classroom_id)
    classroom_service.join_classroom(db, classroom=classroom, user=current_user)
    return SuccessResponse()


@router.post("/joinByCode", response_model=JoinByCodeResponse)
def join_by_code(
    payload: JoinByCodeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = classroom_service.get_classroom_by_code(db, payload.code)
    if not classroom:
        raise HTTPException(status_code=404, detail="Classroom not found")

    classroom_service.join_classroom(db, classroom=classroom, user=current_user)
    return JoinByCodeResponse(classroom=ClassroomPublic.model_validate(classroom))


@router.get("/classrooms/{classroom_id}/members", response_model=List[MemberPublic])
def list_members(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return classroom_service.list_members(db, classroom_id=classroom_id)


@router.get("/classrooms/{classroom_id}/messages", response_model=List[MessagePublic])
def list_messages(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    skip: int = 0,
    limit: int = 100,
):
    """
    Chat history, oldest first.
    """
    _get_classroom_or_404(db, classroom_id)
    return chat_service.list_messages(db, classroom_id=classroom_id, skip=skip, limit=limit)
