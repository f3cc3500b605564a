# classhub/models/user.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from classhub.db.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # either email or phone identifies the user; both are unique when present
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(32), unique=True, nullable=True, index=True)
    university = Column(String(255), nullable=False, default="")
    college = Column(String(255), nullable=False, default="")
    student_id = Column(String(64), nullable=True)
    role = Column(String(20), nullable=False)  # 'teacher' / 'student'
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
