# classhub/schemas/user.py
from pydantic import BaseModel


class UserProfile(BaseModel):
    id: int
    name: str
    role: str  # "teacher" / "student"
    email: str | None = None
    phone: str | None = None
    university: str = ""
    college: str = ""
    student_id: str | None = None

    model_config = {"from_attributes": True}


class MeResponse(BaseModel):
    user: UserProfile


class MemberPublic(BaseModel):
    id: int
    name: str
    role: str
    college: str = ""

    model_config = {"from_attributes": True}
