# classhub/services/classroom_service.py
import logging
import secrets
import string
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classhub.models.classroom import Classroom, ClassroomMember
from classhub.models.user import User

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.digits + string.ascii_uppercase
CODE_LENGTH = 6


class ClassroomError(Exception):
    pass


def random_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def generate_unique_code(db: Session) -> str:
    """
    Draw random codes until one is not held by any classroom.
    Check-then-insert: two concurrent creates can still race on the same code,
    in which case the unique index rejects the second insert.
    """
    code = random_code()
    while db.query(Classroom.id).filter(Classroom.code == code).first() is not None:
        code = random_code()
    return code


def create_classroom(db: Session, *, teacher: User, name: str) -> Classroom:
    code = generate_unique_code(db)
    classroom = Classroom(name=name, code=code, teacher_id=teacher.id)
    db.add(classroom)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Classroom creation failed: %s", e)
        raise ClassroomError("Failed to create classroom") from e
    db.refresh(classroom)
    logger.info("Classroom %s created by teacher %s (code %s)", classroom.id, teacher.id, code)
    return classroom


def get_classroom(db: Session, classroom_id: int) -> Optional[Classroom]:
    return db.query(Classroom).get(classroom_id)


def get_classroom_by_code(db: Session, code: str) -> Optional[Classroom]:
    return db.query(Classroom).filter(Classroom.code == code.strip().upper()).first()


def list_classrooms_for_user(db: Session, *, user: User) -> List[Classroom]:
    """
    Teachers see the classrooms they own, students the ones they joined.
    Newest first.
    """
    query = db.query(Classroom)
    if user.role == "teacher":
        query = query.filter(Classroom.teacher_id == user.id)
    else:
        query = query.join(
            ClassroomMember, ClassroomMember.classroom_id == Classroom.id
        ).filter(ClassroomMember.user_id == user.id)
    return query.order_by(Classroom.created_at.desc(), Classroom.id.desc()).all()


def is_member(db: Session, *, classroom_id: int, user_id: int) -> bool:
    return (
        db.query(ClassroomMember.id)
        .filter(
            ClassroomMember.classroom_id == classroom_id,
            ClassroomMember.user_id == user_id,
        )
        .first()
        is not None
    )


def join_classroom(db: Session, *, classroom: Classroom, user: User) -> bool:
    """
    Add the membership row unless it already exists.
    Returns True when a row was created; re-joining is a no-op.
    """
    if is_member(db, classroom_id=classroom.id, user_id=user.id):
        return False
    db.add(ClassroomMember(classroom_id=classroom.id, user_id=user.id, approved=True))
    db.commit()
    logger.info("User %s joined classroom %s", user.id, classroom.id)
    return True


def list_members(db: Session, *, classroom_id: int) -> List[User]:
    return (
        db.query(User)
        .join(ClassroomMember, ClassroomMember.user_id == User.id)
        .filter(ClassroomMember.classroom_id == classroom_id)
        .order_by(ClassroomMember.joined_at.asc(), ClassroomMember.id.asc())
        .all()
    )


def member_emails(db: Session, *, classroom_id: int) -> List[str]:
    return [u.email for u in list_members(db, classroom_id=classroom_id) if u.email]
