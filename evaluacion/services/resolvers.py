# evaluacion/services/resolvers.py
"""
Resolución de entidades: un resolver por tabla, todos con la misma sesión.

Las búsquedas "en lote" usan un único IN por salto; nunca una consulta por fila.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Generic, Iterable, Optional, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from evaluacion.core.errors import NotFoundError
from evaluacion.models.academic import Career, Course, Group
from evaluacion.models.people import Enrollment, Professor, ProfessorAssignment, Student

T = TypeVar("T")


def _clean_ids(ids: Iterable[Any]) -> list:
    return sorted({i for i in ids if i is not None})


class EntityResolver(Generic[T]):
    model: Any = None
    active_column: Optional[str] = None
    not_found_detail = "Registro no encontrado"

    def __init__(self, db: Session):
        self.db = db

    def _base(self):
        stmt = select(self.model)
        if self.active_column:
            stmt = stmt.where(getattr(self.model, self.active_column).is_(True))
        return stmt

    def get(self, entity_id: Optional[int]) -> Optional[T]:
        if entity_id is None:
            return None
        return self.db.execute(
            self._base().where(self.model.id == entity_id)
        ).scalar_one_or_none()

    def require(self, entity_id: Optional[int]) -> T:
        obj = self.get(entity_id)
        if obj is None:
            raise NotFoundError(self.not_found_detail)
        return obj

    def many(self, ids: Iterable[Optional[int]]) -> dict[int, T]:
        wanted = _clean_ids(ids)
        if not wanted:
            return {}
        rows = self.db.execute(self._base().where(self.model.id.in_(wanted))).scalars().all()
        return {r.id: r for r in rows}


class CareerResolver(EntityResolver[Career]):
    model = Career
    active_column = "activa"
    not_found_detail = "Carrera no encontrada"

    def active(self) -> list[Career]:
        return list(self.db.execute(self._base().order_by(Career.nombre, Career.id)).scalars())


class CourseResolver(EntityResolver[Course]):
    model = Course
    not_found_detail = "Curso no encontrado"

    def for_groups(self, group_ids: Iterable[Optional[int]]) -> dict[int, Course]:
        """grupo -> curso en dos saltos (grupos, luego cursos)."""
        course_by_group = GroupResolver(self.db).course_ids(group_ids)
        courses = self.many(course_by_group.values())
        return {
            gid: courses[cid]
            for gid, cid in course_by_group.items()
            if cid in courses
        }

    def in_careers(self, career_ids: Iterable[int]) -> list[Course]:
        wanted = _clean_ids(career_ids)
        if not wanted:
            return []
        return list(self.db.execute(
            select(Course).where(Course.carrera_id.in_(wanted)).order_by(Course.nombre, Course.id)
        ).scalars())


class GroupResolver(EntityResolver[Group]):
    model = Group
    not_found_detail = "Grupo no encontrado"

    def course_ids(self, group_ids: Iterable[Optional[int]]) -> dict[int, int]:
        wanted = _clean_ids(group_ids)
        if not wanted:
            return {}
        rows = self.db.execute(
            select(Group.id, Group.curso_id).where(Group.id.in_(wanted))
        ).all()
        return {gid: cid for gid, cid in rows if cid is not None}


class ProfessorResolver(EntityResolver[Professor]):
    model = Professor
    active_column = "activo"
    not_found_detail = "Profesor no encontrado"

    def by_user(self, user_id: UUID) -> Optional[Professor]:
        return self.db.execute(
            self._base().where(Professor.usuario_id == user_id)
        ).scalar_one_or_none()

    def active(self, ids: Optional[Iterable[int]] = None) -> list[Professor]:
        stmt = self._base().options(joinedload(Professor.user))
        if ids is not None:
            wanted = _clean_ids(ids)
            if not wanted:
                return []
            stmt = stmt.where(Professor.id.in_(wanted))
        return list(self.db.execute(stmt.order_by(Professor.id)).scalars())

    def in_career(self, career_id: int) -> list[Professor]:
        return list(self.db.execute(
            self._base()
            .options(joinedload(Professor.user))
            .where(Professor.carrera_id == career_id)
            .order_by(Professor.id)
        ).scalars())

    def assigned_courses(self, professor_ids: Iterable[int]) -> dict[int, list[Course]]:
        """Cursos por profesor vía asignaciones_profesor (activas)."""
        wanted = _clean_ids(professor_ids)
        out: dict[int, list[Course]] = {pid: [] for pid in wanted}
        if not wanted:
            return out
        rows = self.db.execute(
            select(ProfessorAssignment.profesor_id, Course)
            .join(Course, Course.id == ProfessorAssignment.curso_id)
            .where(ProfessorAssignment.profesor_id.in_(wanted), ProfessorAssignment.activo.is_(True))
            .order_by(Course.nombre, Course.id)
        ).all()
        seen: set[tuple[int, int]] = set()
        for pid, course in rows:
            if (pid, course.id) in seen:
                continue
            seen.add((pid, course.id))
            out[pid].append(course)
        return out

    def teaches_group(self, professor_id: int, group_id: int) -> bool:
        return self.db.execute(
            select(ProfessorAssignment.id).where(
                ProfessorAssignment.profesor_id == professor_id,
                ProfessorAssignment.grupo_id == group_id,
                ProfessorAssignment.activo.is_(True),
            )
        ).first() is not None

    def teaches_course(self, professor_id: int, course_id: int) -> bool:
        return self.db.execute(
            select(ProfessorAssignment.id).where(
                ProfessorAssignment.profesor_id == professor_id,
                ProfessorAssignment.curso_id == course_id,
                ProfessorAssignment.activo.is_(True),
            )
        ).first() is not None

    def for_groups(self, group_ids: Iterable[int]) -> dict[int, list[int]]:
        wanted = _clean_ids(group_ids)
        out: dict[int, list[int]] = defaultdict(list)
        if not wanted:
            return {}
        rows = self.db.execute(
            select(ProfessorAssignment.grupo_id, ProfessorAssignment.profesor_id)
            .join(Professor, Professor.id == ProfessorAssignment.profesor_id)
            .where(
                ProfessorAssignment.grupo_id.in_(wanted),
                ProfessorAssignment.activo.is_(True),
                Professor.activo.is_(True),
            )
            .order_by(ProfessorAssignment.profesor_id)
        ).all()
        for gid, pid in rows:
            out[gid].append(pid)
        return dict(out)

    def groups_in_course(self, professor_id: int, course_id: int) -> list[Group]:
        return list(self.db.execute(
            select(Group)
            .join(ProfessorAssignment, ProfessorAssignment.grupo_id == Group.id)
            .where(
                ProfessorAssignment.profesor_id == professor_id,
                ProfessorAssignment.curso_id == course_id,
                ProfessorAssignment.activo.is_(True),
            )
            .order_by(Group.numero_grupo, Group.id)
        ).scalars())


class StudentResolver(EntityResolver[Student]):
    model = Student
    active_column = "activo"
    not_found_detail = "Estudiante no encontrado"

    def by_user(self, user_id: UUID) -> Optional[Student]:
        return self.db.execute(
            self._base().where(Student.usuario_id == user_id)
        ).scalar_one_or_none()

    def require_by_user(self, user_id: UUID) -> Student:
        student = self.by_user(user_id)
        if student is None:
            raise NotFoundError("Perfil de estudiante no encontrado")
        return student

    def enrolled_group_ids(self, student_id: int) -> list[int]:
        return list(self.db.execute(
            select(Enrollment.grupo_id)
            .where(Enrollment.estudiante_id == student_id, Enrollment.activa.is_(True))
            .order_by(Enrollment.grupo_id)
        ).scalars())

    def is_enrolled(self, student_id: int, group_id: int) -> bool:
        return self.db.execute(
            select(Enrollment.id).where(
                Enrollment.estudiante_id == student_id,
                Enrollment.grupo_id == group_id,
                Enrollment.activa.is_(True),
            )
        ).first() is not None
