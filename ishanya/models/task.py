# ishanya/models/task.py
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, func, text

from ..db.base import Base, DictMixin


class Task(DictMixin, Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, nullable=False, index=True)
    description = Column(Text, nullable=False)
    due_date = Column(DateTime, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, server_default=text("0"))
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, student={self.student_id}, completed={self.completed})>"
