# evaluacion/api/v1/endpoints/evaluations.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import get_caller, require_permission
from evaluacion.core.permissions import MANAGE_DEPARTMENT, VIEW_EVALUATIONS
from evaluacion.db.session import get_db
from evaluacion.models.evaluation import Evaluation
from evaluacion.schemas.evaluations import (
    CourseQuestionOut, EvaluationCreateIn, EvaluationOut, MyEvaluationOut,
    QuestionIn, QuestionOut, QuestionPatch,
)
from evaluacion.services import questions as question_service
from evaluacion.services.access import Caller, ensure_can_submit, ensure_question_scope
from evaluacion.services.audit import audit_log
from evaluacion.services.resolvers import CourseResolver, ProfessorResolver, StudentResolver
from evaluacion.services.submissions import submit_evaluation

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


# -------------------- envío -------------------- #

@router.post("", response_model=EvaluationOut, status_code=status.HTTP_201_CREATED)
def create_evaluation(
    payload: EvaluationCreateIn,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Registra la evaluación de un estudiante.
    403 sin inscripción/asignación, 404 sin perfil, 409 duplicada, 422 respuestas inválidas.
    """
    return submit_evaluation(db, caller, payload, request=request)


@router.get("/mine", response_model=List[MyEvaluationOut])
def my_evaluations(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    ensure_can_submit(caller)
    student = StudentResolver(db).require_by_user(caller.user_id)
    rows = db.execute(
        select(Evaluation)
        .where(Evaluation.estudiante_id == student.id)
        .order_by(Evaluation.fecha_creacion.desc(), Evaluation.id.desc())
    ).scalars().all()

    courses = CourseResolver(db).for_groups(r.grupo_id for r in rows)
    profs = {p.id: p for p in ProfessorResolver(db).active({r.profesor_id for r in rows})}
    out = []
    for r in rows:
        course = courses.get(r.grupo_id)
        prof = profs.get(r.profesor_id)
        out.append(MyEvaluationOut(
            id=r.id,
            professor_id=r.profesor_id,
            professor_name=prof.user.nombre_completo if prof and prof.user else None,
            group_id=r.grupo_id,
            course_id=course.id if course else None,
            course_name=course.nombre if course else None,
            rating=r.calificacion_general,
            comments=r.comentarios,
            created_at=r.fecha_creacion,
        ))
    return out


# -------------------- preguntas -------------------- #

@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    career_id: Optional[int] = Query(None, description="Solo preguntas de esta carrera"),
    db: Session = Depends(get_db),
    _caller: Caller = Depends(get_caller),
):
    return question_service.list_questions(db, career_id=career_id)


@router.get("/questions/course/{course_id}", response_model=List[CourseQuestionOut])
def course_questions(
    course_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _caller: Caller = Depends(require_permission(VIEW_EVALUATIONS)),
):
    """Preguntas específicas de la carrera del curso o, si no hay, las generales."""
    return question_service.format_for_form(question_service.questions_for_course(db, course_id))


@router.post("/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def create_question(
    payload: QuestionIn,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_permission(MANAGE_DEPARTMENT)),
):
    ensure_question_scope(db, caller, payload.id_carrera)
    q = question_service.create_question(db, payload)
    audit_log(db, user_id=caller.user_id, accion="pregunta.crear", payload={"pregunta_id": q.id}, request=request)
    db.commit()
    db.refresh(q)
    return q


@router.put("/questions/{question_id}", response_model=QuestionOut)
def update_question(
    payload: QuestionPatch,
    request: Request,
    question_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_permission(MANAGE_DEPARTMENT)),
):
    current = question_service.get_question(db, question_id)
    ensure_question_scope(db, caller, current.id_carrera)
    if "id_carrera" in payload.model_fields_set:
        ensure_question_scope(db, caller, payload.id_carrera)
    q = question_service.update_question(db, question_id, payload)
    audit_log(db, user_id=caller.user_id, accion="pregunta.actualizar",
              payload={"pregunta_id": q.id, **payload.model_dump(exclude_unset=True)}, request=request)
    db.commit()
    db.refresh(q)
    return q


@router.delete("/questions/{question_id}", response_model=QuestionOut)
def deactivate_question(
    request: Request,
    question_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_permission(MANAGE_DEPARTMENT)),
):
    ensure_question_scope(db, caller, question_service.get_question(db, question_id).id_carrera)
    q = question_service.deactivate_question(db, question_id)
    audit_log(db, user_id=caller.user_id, accion="pregunta.desactivar", payload={"pregunta_id": q.id}, request=request)
    db.commit()
    db.refresh(q)
    return q
