from sqlalchemy import Column, Integer, String, DateTime, Boolean, func
from ishanya.db.base import Base

# Login roles
ROLES = ("administrator", "hr", "teacher", "parent")

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, default="teacher")
    full_name = Column(String(128))
    # parents are matched to their parents row by email
    email = Column(String(128))
    is_active = Column(Boolean, default=True)

    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
