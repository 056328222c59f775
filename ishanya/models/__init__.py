# Aggregator: "from ishanya.models import Student, Center, ..." and the table registry

from ishanya.db.base import Base

from .center import Center, Program, Course
from .people import Student, Educator, Employee, Parent
from .task import Task
from .user import User
from .audit import AuditLog

# Tables reachable through bulk insert and the generic table views
TABLE_MODELS = {
    "students": Student,
    "educators": Educator,
    "employees": Employee,
    "centers": Center,
    "programs": Program,
    "courses": Course,
}

__all__ = [
    "Base",
    "Center",
    "Program",
    "Course",
    "Student",
    "Educator",
    "Employee",
    "Parent",
    "Task",
    "User",
    "AuditLog",
    "TABLE_MODELS",
]
