# ishanya/schemas/records.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

DATE_YMD = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_ymd(v):
    if v is None or isinstance(v, date):
        return v
    s = str(v).strip()
    if not DATE_YMD.fullmatch(s):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return date.fromisoformat(s)


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# ========= Student =========
class StudentIn(_Form):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    dob: date
    contact_number: str = Field(min_length=10)
    student_email: Optional[EmailStr] = None
    parents_email: Optional[EmailStr] = None
    address: Optional[str] = None
    program_id: int = Field(ge=1)
    center_id: int = Field(ge=1)

    # optional overrides; defaults are filled in by the service
    student_id: Optional[int] = None
    enrollment_year: Optional[int] = None
    gender: Optional[str] = None
    status: Optional[str] = None
    educator_employee_id: Optional[int] = None

    @field_validator("dob", mode="before")
    @classmethod
    def check_dob(cls, v):
        return _parse_ymd(v)

    @field_validator("student_email", "parents_email", "gender", "status", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


# ========= Employee =========
class EmployeeIn(_Form):
    name: str = Field(min_length=2)
    employee_id: int
    email: EmailStr
    designation: str = Field(min_length=2)
    department: str = Field(min_length=2)
    date_of_joining: date
    contact_number: str = Field(min_length=10)
    center_id: int = Field(ge=1)

    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    employment_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact: Optional[str] = None
    password: Optional[str] = None

    @field_validator("date_of_joining", "date_of_birth", mode="before")
    @classmethod
    def check_dates(cls, v):
        return _parse_ymd(_blank_to_none(v))


# ========= Educator =========
class EducatorIn(_Form):
    name: str = Field(min_length=2)
    educator_id: int
    email: EmailStr
    designation: str = Field(min_length=2)
    date_of_joining: date
    contact_number: str = Field(min_length=10)
    center_id: int = Field(ge=1)

    # accepted from the form but the educators table has no such columns
    subject: Optional[str] = None
    program_id: Optional[int] = None

    date_of_birth: Optional[date] = None
    work_location: Optional[str] = None

    @field_validator("date_of_joining", "date_of_birth", mode="before")
    @classmethod
    def check_dates(cls, v):
        return _parse_ymd(_blank_to_none(v))


# ========= Center / Program =========
class CenterIn(_Form):
    center_id: int
    name: str = Field(min_length=1)
    location: Optional[str] = None
    description: Optional[str] = None
    num_of_student: Optional[int] = None
    num_of_educator: Optional[int] = None
    num_of_employees: Optional[int] = None


class ProgramIn(_Form):
    program_id: int
    name: str = Field(min_length=1)
    description: Optional[str] = None
    center_id: int


# ========= Task =========
class TaskIn(_Form):
    description: str = Field(min_length=1)
    due_date: datetime
    completed: bool = False


# ========= Pending intake =========
class PendingIntakeIn(_Form):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    dob: Optional[str] = ""
    gender: Optional[str] = ""
    program: Optional[str] = ""
    center: Optional[str] = ""
    contact_person: Optional[str] = ""
    contact_number: Optional[str] = ""
    email: Optional[str] = ""
    address: Optional[str] = ""


# ========= Parent =========
class FeedbackIn(BaseModel):
    feedback: str = ""
