from .base import Base, metadata
from .auth import Role, User
from .academics import (
    Group,
    Subject,
    Semester,
    Teacher,
    Student,
    TeachingAssignment,
    Grade,
    Attendance
)

# Import all models to ensure relationships are properly set up
from . import auth, academics

__all__ = [
    'Base',
    'metadata',
    # Auth models
    'Role',
    'User',
    # Reference data
    'Group',
    'Subject',
    'Semester',
    # Profiles
    'Teacher',
    'Student',
    # Teaching graph
    'TeachingAssignment',
    'Grade',
    'Attendance',
]
