# classhub/schemas/classroom.py
from pydantic import BaseModel, field_validator
from datetime import datetime


class ClassroomCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name required")
        return v


class JoinByCodeRequest(BaseModel):
    code: str


class ClassroomPublic(BaseModel):
    id: int
    name: str
    code: str
    teacher_id: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class JoinByCodeResponse(BaseModel):
    success: bool = True
    classroom: ClassroomPublic
