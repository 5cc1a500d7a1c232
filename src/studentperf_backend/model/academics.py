from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer,
    Numeric, String, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from .base import Base


class Group(Base):
    __tablename__ = 'group'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False)
    description = Column(String(500))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    # Relationships
    students = relationship('Student', back_populates='group')
    teaching_assignments = relationship('TeachingAssignment', back_populates='group')


class Subject(Base):
    __tablename__ = 'subject'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    code = Column(String(50))
    description = Column(String(500))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    teaching_assignments = relationship('TeachingAssignment', back_populates='subject')


class Semester(Base):
    __tablename__ = 'semester'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    teaching_assignments = relationship('TeachingAssignment', back_populates='semester')


class Teacher(Base):
    __tablename__ = 'teacher'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True)
    department = Column(String(200))
    position = Column(String(200))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    user = relationship('User', back_populates='teacher')
    teaching_assignments = relationship('TeachingAssignment', back_populates='teacher')


class Student(Base):
    __tablename__ = 'student'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True)
    group_id = Column(ForeignKey('group.id', ondelete='SET NULL'), index=True)
    date_of_birth = Column(Date)
    enrollment_date = Column(Date)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    user = relationship('User', back_populates='student')
    group = relationship('Group', back_populates='students')
    grades = relationship('Grade', back_populates='student')
    attendances = relationship('Attendance', back_populates='student')


class TeachingAssignment(Base):
    __tablename__ = 'teaching_assignment'
    __table_args__ = (
        UniqueConstraint('teacher_id', 'subject_id', 'group_id', 'semester_id',
                         name='teaching_assignment_binding_key'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(ForeignKey('teacher.id', ondelete='CASCADE'), nullable=False, index=True)
    subject_id = Column(ForeignKey('subject.id', ondelete='RESTRICT'), nullable=False)
    # NULL for cross-group (elective) teaching
    group_id = Column(ForeignKey('group.id', ondelete='RESTRICT'), index=True)
    semester_id = Column(ForeignKey('semester.id', ondelete='RESTRICT'), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    teacher = relationship('Teacher', back_populates='teaching_assignments')
    subject = relationship('Subject', back_populates='teaching_assignments')
    group = relationship('Group', back_populates='teaching_assignments')
    semester = relationship('Semester', back_populates='teaching_assignments')
    grades = relationship('Grade', back_populates='assignment')
    attendances = relationship('Attendance', back_populates='assignment')


class Grade(Base):
    __tablename__ = 'grade'

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False, index=True)
    assignment_id = Column(ForeignKey('teaching_assignment.id', ondelete='RESTRICT'), nullable=False, index=True)
    value = Column(Numeric(5, 2), nullable=False)
    control_type = Column(String(50), nullable=False)
    date_received = Column(Date, nullable=False)
    status = Column(String(50), nullable=False)
    notes = Column(String(500))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    student = relationship('Student', back_populates='grades')
    assignment = relationship('TeachingAssignment', back_populates='grades')


class Attendance(Base):
    __tablename__ = 'attendance'

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False, index=True)
    assignment_id = Column(ForeignKey('teaching_assignment.id', ondelete='RESTRICT'), nullable=False, index=True)
    date = Column(Date, nullable=False)
    status = Column(String(50), nullable=False)
    remarks = Column(String(500))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    student = relationship('Student', back_populates='attendances')
    assignment = relationship('TeachingAssignment', back_populates='attendances')
