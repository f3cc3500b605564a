# classhub/api/v1/endpoints/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classhub.core.security import (
    authenticate_user,
    get_password_hash,
    token_for_user,
)
from classhub.db.session import get_db
from classhub.models.user import User
from classhub.schemas.auth import (
    Token,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    SuccessResponse,
    UserPublic,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=SuccessResponse)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        university=payload.university or "",
        college=payload.college or "",
        student_id=payload.student_id,
        role=payload.role,
        password_hash=get_password_hash(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # duplicate email or phone; the message stays generic on purpose
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        )

    logger.info("Registered %s %s", user.role, user.id)
    return SuccessResponse()


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    identifier = payload.identifier
    if not identifier or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing fields",
        )

    user = authenticate_user(db, identifier, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return LoginResponse(token=token_for_user(user), user=UserPublic.model_validate(user))


# OAuth2 form variant so the docs' "Authorize" button works
@router.post("/token", response_model=Token)
def login_for_access_token_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    OAuth2 password flow. `username` takes an email address or phone number.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=token_for_user(user))
