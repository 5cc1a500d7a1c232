from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from .base import Base


class Role(Base):
    __tablename__ = 'role'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    # Relationships
    users = relationship('User', back_populates='role')


class User(Base):
    __tablename__ = 'user'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(320), unique=True)
    given_name = Column(String(255))
    family_name = Column(String(255))
    role_id = Column(ForeignKey('role.id', ondelete='RESTRICT'), index=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True))

    role = relationship('Role', back_populates='users')
    teacher = relationship('Teacher', back_populates='user', uselist=False)
    student = relationship('Student', back_populates='user', uselist=False)
