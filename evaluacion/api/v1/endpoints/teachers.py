# evaluacion/api/v1/endpoints/teachers.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import get_caller, require_permission
from evaluacion.core.errors import PermissionDeniedError
from evaluacion.core.permissions import VIEW_REPORTS
from evaluacion.db.session import get_db
from evaluacion.models.people import Professor
from evaluacion.schemas.stats import CourseRatingOut, EvaluationStats
from evaluacion.schemas.teacher import (
    ByCareerOut, CareerOut, CareerRosterOut, CourseRef, GroupOut,
    TeacherOut, TeacherWithCoursesOut,
)
from evaluacion.services.access import (
    Caller, ensure_all_careers, ensure_career_scope, ensure_professor_scope, own_professor,
)
from evaluacion.services.resolvers import CareerResolver, ProfessorResolver, StudentResolver
from evaluacion.services.stats import EvaluationAggregator

router = APIRouter(prefix="/teachers", tags=["teachers"])


# -------------------- helpers -------------------- #

def _teacher_out(p: Professor) -> TeacherOut:
    user = p.user
    return TeacherOut(
        id=p.id,
        usuario_id=str(p.usuario_id),
        nombre=(user.nombre_completo or user.email) if user else "",
        email=user.email if user else "",
        carrera_id=p.carrera_id,
        codigo_profesor=p.codigo_profesor,
    )


def _roster(
    db: Session, professors: List[Professor], period: Optional[str] = None, with_stats: bool = True
) -> List[TeacherWithCoursesOut]:
    ids = [p.id for p in professors]
    courses = ProfessorResolver(db).assigned_courses(ids)
    stats = EvaluationAggregator(db).professor_summaries(ids, period) if with_stats else {}
    return [
        TeacherWithCoursesOut(
            **_teacher_out(p).model_dump(),
            cursos=[CourseRef.model_validate(c) for c in courses.get(p.id, [])],
            stats=stats.get(p.id),
        )
        for p in professors
    ]


# -------------------- endpoints -------------------- #

@router.get("", response_model=List[TeacherOut])
def list_teachers(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Profesores activos visibles para quien consulta."""
    resolver = ProfessorResolver(db)

    if caller.sees_everything:
        return [_teacher_out(p) for p in resolver.active()]

    visible: dict[int, Professor] = {}
    if caller.is_student:
        student = StudentResolver(db).by_user(caller.user_id)
        if student is not None:
            by_group = resolver.for_groups(StudentResolver(db).enrolled_group_ids(student.id))
            for p in resolver.active({pid for pids in by_group.values() for pid in pids}):
                visible[p.id] = p
    if caller.is_coordinator:
        for career_id in caller.career_ids(db):
            for p in resolver.in_career(career_id):
                visible[p.id] = p
    if caller.is_professor or caller.is_coordinator:
        own = own_professor(db, caller)
        if own is not None:
            visible[own.id] = own

    if not visible and not (caller.is_student or caller.can(VIEW_REPORTS)):
        raise PermissionDeniedError("No tienes permisos para acceder a este recurso")
    return [_teacher_out(visible[pid]) for pid in sorted(visible)]


@router.get("/careers", response_model=List[CareerOut])
def list_careers(
    db: Session = Depends(get_db),
    _caller: Caller = Depends(require_permission(VIEW_REPORTS)),
):
    return CareerResolver(db).active()


@router.get("/faculty", response_model=List[CareerRosterOut])
def faculty_roster(
    period: Optional[str] = Query(None, description="Periodo YYYY-1 / YYYY-2"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Carreras activas con su plantilla de profesores (decano / admin)."""
    ensure_all_careers(caller)
    out = []
    for career in CareerResolver(db).active():
        profs = _roster(db, ProfessorResolver(db).in_career(career.id), period)
        out.append(CareerRosterOut(
            **CareerOut.model_validate(career).model_dump(),
            total_profesores=len(profs),
            profesores=profs,
        ))
    return out


@router.get("/by-career/{career_id}", response_model=ByCareerOut)
def teachers_by_career(
    career_id: int = Path(..., ge=1),
    period: Optional[str] = Query(None, description="Periodo YYYY-1 / YYYY-2"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_career_scope(db, caller, career_id)
    career = CareerResolver(db).get(career_id)
    if career is None:
        return ByCareerOut(career_id=career_id, period=period, total_profesores=0, profesores=[])

    profs = _roster(db, ProfessorResolver(db).in_career(career_id), period)
    return ByCareerOut(
        career_id=career_id,
        carrera=CareerOut.model_validate(career),
        period=period,
        total_profesores=len(profs),
        profesores=profs,
    )


@router.get("/{professor_id}/stats", response_model=EvaluationStats)
def professor_stats(
    professor_id: int = Path(..., ge=1),
    period: Optional[str] = Query(None, description="Periodo YYYY-1 / YYYY-2"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_professor_scope(db, caller, professor_id)
    return EvaluationAggregator(db).for_professor(professor_id, period)


@router.get("/{professor_id}/courses/{course_id}/rating", response_model=CourseRatingOut)
def professor_course_rating(
    professor_id: int = Path(..., ge=1),
    course_id: int = Path(..., ge=1),
    period: Optional[str] = Query(None, description="Periodo YYYY-1 / YYYY-2"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Promedio Likert por pregunta del profesor en el curso."""
    ensure_professor_scope(db, caller, professor_id)
    return EvaluationAggregator(db).course_rating(professor_id, course_id, period)


@router.get("/{professor_id}/courses/{course_id}/groups", response_model=List[GroupOut])
def professor_course_groups(
    professor_id: int = Path(..., ge=1),
    course_id: int = Path(..., ge=1),
    _caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ProfessorResolver(db).groups_in_course(professor_id, course_id)
