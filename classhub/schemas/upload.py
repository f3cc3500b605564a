# classhub/schemas/upload.py
from pydantic import BaseModel
from datetime import datetime


class UploadPublic(BaseModel):
    id: int
    classroom_id: int
    teacher_id: int
    filename: str
    original_name: str
    mimetype: str
    size: int
    url: str
    type: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
