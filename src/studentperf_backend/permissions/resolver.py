"""
Profile resolver: turns an already-authenticated user id into a Principal.
"""

import logging
from typing import Dict, Optional

from studentperf_backend.permissions.principal import Principal, Role, role_from_name
from studentperf_backend.repositories.academics import AcademicRepository
from studentperf_backend.repositories.base import NotFoundError
from studentperf_backend.settings import settings

logger = logging.getLogger(__name__)


class ProfileResolver:
    """Builds principals from the account, role and profile tables.

    ``resolve`` returns None whenever no consistent principal can be built,
    which callers treat as unauthenticated.
    """

    def __init__(self, repository: AcademicRepository,
                 role_aliases: Optional[Dict[str, str]] = None):
        self.repository = repository
        self.role_aliases = role_aliases if role_aliases is not None else settings.ROLE_NAME_ALIASES

    def resolve(self, user_id: int) -> Optional[Principal]:
        try:
            role_name = self.repository.get_user_role(user_id)
        except NotFoundError:
            logger.info(f"No account for user {user_id}")
            return None

        role = role_from_name(role_name, self.role_aliases)
        if role is None:
            logger.warning(f"User {user_id} has unmapped role {role_name!r}")
            return None

        if role == Role.ADMIN:
            return Principal.admin(user_id)

        if role == Role.TEACHER:
            teacher = self.repository.get_teacher_profile(user_id)
            if teacher is None:
                logger.warning(f"Teacher account {user_id} has no teacher profile")
                return None
            return Principal.teacher(user_id, teacher.id)

        student = self.repository.get_student_profile(user_id)
        if student is None:
            logger.warning(f"Student account {user_id} has no student profile")
            return None
        return Principal.student(user_id, student.id)
