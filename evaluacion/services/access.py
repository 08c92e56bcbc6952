# evaluacion/services/access.py
"""
Reglas de alcance para reportes, envíos y banco de preguntas.

- admin / decano: cualquier profesor, curso o carrera.
- coordinador: sus carreras (coordinadores.activo), los profesores y cursos
  de esas carreras, y a sí mismo.
- profesor / docente sin otro rol de reporte: solo su propio id de profesor,
  resuelto desde el token, nunca desde el cliente.
- estudiante: no lee agregados; solo envía evaluaciones.
- banco de preguntas: las generales solo decano/admin; el coordinador, las
  de sus carreras.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from evaluacion.core.errors import PermissionDeniedError
from evaluacion.core.permissions import (
    ADMIN, COORDINADOR, DECANO, ESTUDIANTE, PROFESSOR_ROLES,
    SUBMIT_EVALUATIONS, VIEW_ALL_CAREERS, VIEW_REPORTS, allows,
)
from evaluacion.models.people import Professor
from evaluacion.models.user import User
from evaluacion.services.resolvers import CourseResolver, ProfessorResolver
from evaluacion.services.roles import coordinated_career_ids

logger = logging.getLogger(__name__)


@dataclass
class Caller:
    """Usuario autenticado con sus roles activos y permisos ya resueltos."""
    user: User
    roles: list[str]
    permissions: set[str]
    _career_ids: Optional[list[int]] = field(default=None, repr=False)

    @property
    def user_id(self) -> UUID:
        return self.user.id

    def can(self, permission: str) -> bool:
        return allows(self.permissions, permission)

    def has_any_role(self, *names: str) -> bool:
        return bool(set(self.roles) & set(names))

    @property
    def sees_everything(self) -> bool:
        return self.has_any_role(ADMIN, DECANO)

    @property
    def is_coordinator(self) -> bool:
        return COORDINADOR in self.roles

    @property
    def is_professor(self) -> bool:
        return bool(set(self.roles) & PROFESSOR_ROLES)

    @property
    def is_student(self) -> bool:
        return ESTUDIANTE in self.roles

    def career_ids(self, db: Session) -> list[int]:
        if self._career_ids is None:
            self._career_ids = coordinated_career_ids(db, self.user_id) if self.is_coordinator else []
        return self._career_ids


def _deny(caller: Caller, what: str) -> PermissionDeniedError:
    logger.info("Access denied user=%s roles=%s target=%s", caller.user_id, caller.roles, what)
    return PermissionDeniedError("No tienes permisos para acceder a este recurso")


def own_professor(db: Session, caller: Caller) -> Optional[Professor]:
    return ProfessorResolver(db).by_user(caller.user_id)


def ensure_professor_scope(db: Session, caller: Caller, professor_id: int) -> None:
    if not caller.can(VIEW_REPORTS):
        raise _deny(caller, f"professor:{professor_id}")
    if caller.sees_everything:
        return

    own = own_professor(db, caller) if caller.is_professor or caller.is_coordinator else None
    if own is not None and own.id == professor_id:
        return

    if caller.is_coordinator:
        target = ProfessorResolver(db).get(professor_id)
        # desconocido -> estadísticas en cero, no 404
        if target is None or target.carrera_id in caller.career_ids(db):
            return

    raise _deny(caller, f"professor:{professor_id}")


def ensure_career_scope(db: Session, caller: Caller, career_id: int) -> None:
    if caller.sees_everything:
        return
    if caller.is_coordinator and career_id in caller.career_ids(db):
        return
    raise _deny(caller, f"career:{career_id}")


def ensure_all_careers(caller: Caller) -> None:
    if not caller.can(VIEW_ALL_CAREERS):
        raise _deny(caller, "careers:*")


def ensure_course_scope(db: Session, caller: Caller, course_id: int) -> None:
    if not caller.can(VIEW_REPORTS):
        raise _deny(caller, f"course:{course_id}")
    if caller.sees_everything:
        return

    if caller.is_coordinator:
        course = CourseResolver(db).get(course_id)
        if course is None or course.carrera_id in caller.career_ids(db):
            return

    if caller.is_professor:
        own = own_professor(db, caller)
        if own is not None and ProfessorResolver(db).teaches_course(own.id, course_id):
            return

    raise _deny(caller, f"course:{course_id}")


def ensure_can_submit(caller: Caller) -> None:
    if not caller.can(SUBMIT_EVALUATIONS) or not caller.is_student:
        raise PermissionDeniedError("Solo los estudiantes pueden enviar evaluaciones")


def ensure_question_scope(db: Session, caller: Caller, career_id: Optional[int]) -> None:
    """
    Mantenimiento del banco de preguntas. Las generales (sin carrera) solo las
    tocan decano y admin; el coordinador, las de sus carreras.
    """
    if caller.sees_everything:
        return
    if career_id is not None and caller.is_coordinator and career_id in caller.career_ids(db):
        return
    raise _deny(caller, f"question-career:{career_id if career_id is not None else 'general'}")
