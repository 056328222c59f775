# ishanya/models/people.py
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, func

from ..db.base import Base, DictMixin


class Student(DictMixin, Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # business id; nullable so bulk imports may leave it out
    student_id = Column(Integer, unique=True, index=True, nullable=True)

    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    gender = Column(String(32), nullable=True)
    dob = Column(Date, nullable=True)
    enrollment_year = Column(Integer, nullable=True)
    status = Column(String(32), nullable=True)

    student_email = Column(String(255), nullable=True)
    parents_email = Column(String(255), nullable=True)
    contact_number = Column(String(32), nullable=True)
    address = Column(Text, nullable=True)

    program_id = Column(Integer, nullable=True, index=True)
    center_id = Column(Integer, nullable=True, index=True)
    educator_employee_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Student(student_id={self.student_id}, name='{self.first_name} {self.last_name}')>"


class Educator(DictMixin, Base):
    __tablename__ = "educators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    designation = Column(String(128), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    date_of_joining = Column(Date, nullable=True)
    work_location = Column(String(255), nullable=True)
    center_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Educator(employee_id={self.employee_id}, name='{self.name}')>"


class Employee(DictMixin, Base):
    __tablename__ = "employees"

    _hidden = ("password",)

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    gender = Column(String(32), nullable=True)
    designation = Column(String(128), nullable=True)
    department = Column(String(128), nullable=True)
    employment_type = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    date_of_joining = Column(Date, nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact = Column(String(32), nullable=True)
    center_id = Column(Integer, nullable=True, index=True)

    # passlib hash, never returned by the API
    password = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Employee(employee_id={self.employee_id}, name='{self.name}')>"


class Parent(DictMixin, Base):
    __tablename__ = "parents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    student_id = Column(Integer, nullable=True, index=True)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Parent(email='{self.email}', student_id={self.student_id})>"
