# ishanya/models/center.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from ..db.base import Base, DictMixin


class Center(DictMixin, Base):
    __tablename__ = "centers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    center_id = Column(Integer, unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # maintained by the operators, not computed
    num_of_student = Column(Integer, nullable=True, default=0)
    num_of_educator = Column(Integer, nullable=True, default=0)
    num_of_employees = Column(Integer, nullable=True, default=0)

    created_at = Column(DateTime, server_default=func.now())

    programs = relationship(
        "Program",
        back_populates="center",
        primaryjoin="Center.center_id==Program.center_id",
        foreign_keys="Program.center_id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Center(center_id={self.center_id}, name='{self.name}')>"


class Program(DictMixin, Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    program_id = Column(Integer, unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    center_id = Column(Integer, ForeignKey("centers.center_id"), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    center = relationship(
        "Center",
        back_populates="programs",
        primaryjoin="Center.center_id==Program.center_id",
        foreign_keys=[center_id],
    )

    def __repr__(self) -> str:
        return f"<Program(program_id={self.program_id}, name='{self.name}', center={self.center_id})>"


class Course(DictMixin, Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    program_id = Column(Integer, nullable=True)
    center_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, name='{self.name}')>"
