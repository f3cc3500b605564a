# classhub/models/upload.py
from sqlalchemy import BigInteger, Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from classhub.db.base import Base

class Upload(Base):
    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # name on disk (after transcoding, if any)
    filename = Column(String(512), nullable=False)
    original_name = Column(String(512), nullable=False)
    mimetype = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False)  # bytes as received
    url = Column(String(1024), nullable=False)
    type = Column(String(20), nullable=False)  # 'lecture' / 'quiz'

    created_at = Column(DateTime(timezone=True), server_default=func.now())
