# evaluacion/api/v1/endpoints/students.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import get_caller
from evaluacion.core.errors import PermissionDeniedError
from evaluacion.db.session import get_db
from evaluacion.models.evaluation import Evaluation
from evaluacion.schemas.students import EnrolledGroupOut, GroupProfessor, StudentOut
from evaluacion.services.access import Caller
from evaluacion.services.resolvers import (
    CourseResolver, GroupResolver, ProfessorResolver, StudentResolver,
)

router = APIRouter(prefix="/students", tags=["students"])


def _require_student(caller: Caller, db: Session):
    if not caller.is_student:
        raise PermissionDeniedError("Solo estudiantes")
    return StudentResolver(db).require_by_user(caller.user_id)


@router.get("/me", response_model=StudentOut)
def my_profile(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return _require_student(caller, db)


@router.get("/me/groups", response_model=List[EnrolledGroupOut])
def my_groups(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Grupos inscritos con curso, profesores asignados y si ya fueron evaluados."""
    student = _require_student(caller, db)
    students = StudentResolver(db)
    group_ids = students.enrolled_group_ids(student.id)

    groups = GroupResolver(db).many(group_ids)
    courses = CourseResolver(db).for_groups(group_ids)
    prof_ids_by_group = ProfessorResolver(db).for_groups(group_ids)
    profs = {
        p.id: p
        for p in ProfessorResolver(db).active({pid for ids in prof_ids_by_group.values() for pid in ids})
    }
    done = {
        (g, p) for g, p in db.execute(
            select(Evaluation.grupo_id, Evaluation.profesor_id)
            .where(Evaluation.estudiante_id == student.id)
        ).all()
    }

    out = []
    for gid in group_ids:
        group = groups.get(gid)
        if group is None:
            continue
        course = courses.get(gid)
        out.append(EnrolledGroupOut(
            group_id=gid,
            group_number=group.numero_grupo,
            period_id=group.periodo_id,
            course_id=course.id if course else None,
            course_name=course.nombre if course else None,
            course_code=course.codigo if course else None,
            professors=[
                GroupProfessor(
                    id=pid,
                    nombre=profs[pid].user.nombre_completo if profs[pid].user else "",
                    evaluated=(gid, pid) in done,
                )
                for pid in prof_ids_by_group.get(gid, [])
                if pid in profs
            ],
        ))
    return out
