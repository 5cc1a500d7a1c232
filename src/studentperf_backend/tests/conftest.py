"""
Pytest configuration and fixtures for all tests.

The ``academic_graph`` fixture seeds a small but complete academic graph:

- T1 owns A1 (Math, G1, S1); student X is in G1, grade g1 and attendance
  at1 hang off A1 for X
- T2 owns A2 (Physics, G2, S1) and the group-less elective A3 (Math, S1);
  student Y is in G2, grade g2 and attendance at2 hang off A2 for Y
- T3 owns A5 (Math, G1, S1) and therefore teaches X's group the subject of g1
- student Z has no group
"""

import os
import sys
import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure studentperf_backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from studentperf_backend.model import (
    Attendance, Base, Grade, Group, Role, Semester, Student, Subject,
    Teacher, TeachingAssignment, User
)
from studentperf_backend.permissions.core import PermissionEngine
from studentperf_backend.permissions.handlers import PolicyOptions
from studentperf_backend.permissions.principal import Principal


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """Create a test database session using SQLite in-memory."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def academic_graph(test_db: Session) -> SimpleNamespace:
    """Seed the academic graph and return its ids."""
    ids = SimpleNamespace(
        # users
        admin_user=1, t1_user=2, t2_user=3, x_user=4, y_user=5, z_user=6,
        orphan_teacher_user=7, guest_user=8, roleless_user=9, t3_user=10,
        # profiles
        t1=1, t2=2, t3=3, x=1, y=2, z=3,
        # reference data
        g1=1, g2=2, math=1, physics=2, s1=1,
        # teaching graph
        a1=1, a2=2, a3=3, a5=5,
        grade_g1=1, grade_g2=2,
        attendance_x=1, attendance_y=2,
    )

    test_db.add_all([
        Role(id=1, name="Администратор"),
        Role(id=2, name="Преподаватель"),
        Role(id=3, name="Студент"),
        Role(id=4, name="Guest"),
    ])
    test_db.flush()

    test_db.add_all([
        User(id=ids.admin_user, username="admin", role_id=1),
        User(id=ids.t1_user, username="t1", role_id=2),
        User(id=ids.t2_user, username="t2", role_id=2),
        User(id=ids.x_user, username="x", role_id=3),
        User(id=ids.y_user, username="y", role_id=3),
        User(id=ids.z_user, username="z", role_id=3),
        User(id=ids.orphan_teacher_user, username="orphan", role_id=2),
        User(id=ids.guest_user, username="guest", role_id=4),
        User(id=ids.roleless_user, username="nobody", role_id=None),
        User(id=ids.t3_user, username="t3", role_id=2),
    ])
    test_db.add_all([
        Group(id=ids.g1, name="Group 1", code="G1"),
        Group(id=ids.g2, name="Group 2", code="G2"),
        Subject(id=ids.math, name="Math"),
        Subject(id=ids.physics, name="Physics"),
        Semester(id=ids.s1, name="Fall", start_date=date(2024, 9, 1), end_date=date(2024, 12, 31)),
    ])
    test_db.flush()

    test_db.add_all([
        Teacher(id=ids.t1, user_id=ids.t1_user),
        Teacher(id=ids.t2, user_id=ids.t2_user),
        Teacher(id=ids.t3, user_id=ids.t3_user),
        Student(id=ids.x, user_id=ids.x_user, group_id=ids.g1),
        Student(id=ids.y, user_id=ids.y_user, group_id=ids.g2),
        Student(id=ids.z, user_id=ids.z_user, group_id=None),
    ])
    test_db.flush()

    test_db.add_all([
        TeachingAssignment(id=ids.a1, teacher_id=ids.t1, subject_id=ids.math, group_id=ids.g1, semester_id=ids.s1),
        TeachingAssignment(id=ids.a2, teacher_id=ids.t2, subject_id=ids.physics, group_id=ids.g2, semester_id=ids.s1),
        TeachingAssignment(id=ids.a3, teacher_id=ids.t2, subject_id=ids.math, group_id=None, semester_id=ids.s1),
        TeachingAssignment(id=ids.a5, teacher_id=ids.t3, subject_id=ids.math, group_id=ids.g1, semester_id=ids.s1),
    ])
    test_db.flush()

    test_db.add_all([
        Grade(id=ids.grade_g1, student_id=ids.x, assignment_id=ids.a1, value=Decimal("5.00"),
              control_type="exam", date_received=date(2024, 12, 20), status="final"),
        Grade(id=ids.grade_g2, student_id=ids.y, assignment_id=ids.a2, value=Decimal("4.00"),
              control_type="test", date_received=date(2024, 10, 15), status="final"),
        Attendance(id=ids.attendance_x, student_id=ids.x, assignment_id=ids.a1,
                   date=date(2024, 9, 2), status="present"),
        Attendance(id=ids.attendance_y, student_id=ids.y, assignment_id=ids.a2,
                   date=date(2024, 9, 3), status="absent"),
    ])
    test_db.commit()

    return ids


@pytest.fixture
def engine(test_db: Session, academic_graph) -> PermissionEngine:
    return PermissionEngine.for_session(test_db, PolicyOptions())


@pytest.fixture
def open_engine(test_db: Session, academic_graph) -> PermissionEngine:
    """Engine that opens group-less assignments to every grouped student."""
    return PermissionEngine.for_session(test_db, PolicyOptions(open_ungrouped_assignments=True))


@pytest.fixture
def admin(academic_graph) -> Principal:
    return Principal.admin(academic_graph.admin_user)


@pytest.fixture
def teacher_t1(academic_graph) -> Principal:
    return Principal.teacher(academic_graph.t1_user, academic_graph.t1)


@pytest.fixture
def teacher_t2(academic_graph) -> Principal:
    return Principal.teacher(academic_graph.t2_user, academic_graph.t2)


@pytest.fixture
def teacher_t3(academic_graph) -> Principal:
    return Principal.teacher(academic_graph.t3_user, academic_graph.t3)


@pytest.fixture
def student_x(academic_graph) -> Principal:
    return Principal.student(academic_graph.x_user, academic_graph.x)


@pytest.fixture
def student_y(academic_graph) -> Principal:
    return Principal.student(academic_graph.y_user, academic_graph.y)


@pytest.fixture
def student_z(academic_graph) -> Principal:
    return Principal.student(academic_graph.z_user, academic_graph.z)
