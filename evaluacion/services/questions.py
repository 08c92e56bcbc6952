# evaluacion/services/questions.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from evaluacion.core.errors import NotFoundError, ValidationError
from evaluacion.models.evaluation import EvaluationQuestion, QuestionCategory
from evaluacion.schemas.evaluations import CourseQuestionOut, QuestionIn, QuestionPatch
from evaluacion.services.resolvers import CareerResolver, CourseResolver

logger = logging.getLogger(__name__)


def _ordered(stmt):
    return stmt.order_by(EvaluationQuestion.orden, EvaluationQuestion.id)


def list_questions(
    db: Session, career_id: Optional[int] = None, include_inactive: bool = False
) -> list[EvaluationQuestion]:
    stmt = select(EvaluationQuestion)
    if not include_inactive:
        stmt = stmt.where(EvaluationQuestion.activa.is_(True))
    if career_id is not None:
        stmt = stmt.where(EvaluationQuestion.id_carrera == career_id)
    return list(db.execute(_ordered(stmt)).scalars())


def questions_for_career(db: Session, career_id: Optional[int]) -> list[EvaluationQuestion]:
    """Preguntas propias de la carrera si existen; si no, las generales (id_carrera NULL)."""
    base = select(EvaluationQuestion).options(joinedload(EvaluationQuestion.categoria)).where(
        EvaluationQuestion.activa.is_(True)
    )
    if career_id is not None:
        specific = list(db.execute(
            _ordered(base.where(EvaluationQuestion.id_carrera == career_id))
        ).scalars())
        if specific:
            return specific
    return list(db.execute(
        _ordered(base.where(EvaluationQuestion.id_carrera.is_(None)))
    ).scalars())


def questions_for_course(db: Session, course_id: int) -> list[EvaluationQuestion]:
    course = CourseResolver(db).require(course_id)
    return questions_for_career(db, course.carrera_id)


def format_for_form(questions: list[EvaluationQuestion]) -> list[CourseQuestionOut]:
    return [
        CourseQuestionOut(
            id=q.id,
            category=q.categoria.nombre if q.categoria else None,
            question=q.texto_pregunta,
            type=q.tipo_pregunta,
            options=q.opciones,
            required=bool(q.obligatoria),
        )
        for q in questions
    ]


def _check_payload(db: Session, data: dict) -> None:
    errors = []
    if data.get("tipo_pregunta") == "opcion" and not data.get("opciones"):
        errors.append({"field": "opciones", "message": "Las preguntas de opción requieren opciones"})
    if data.get("categoria_id") is not None and db.get(QuestionCategory, data["categoria_id"]) is None:
        errors.append({"field": "categoria_id", "message": "Categoría no existe"})
    if data.get("id_carrera") is not None and CareerResolver(db).get(data["id_carrera"]) is None:
        errors.append({"field": "id_carrera", "message": "Carrera no existe o está inactiva"})
    if errors:
        raise ValidationError("Pregunta inválida", errors)


def create_question(db: Session, payload: QuestionIn) -> EvaluationQuestion:
    data = payload.model_dump()
    _check_payload(db, data)
    q = EvaluationQuestion(**data, activa=True)
    db.add(q)
    db.flush()
    logger.info("Question %s created (career=%s)", q.id, q.id_carrera)
    return q


def get_question(db: Session, question_id: int) -> EvaluationQuestion:
    q = db.get(EvaluationQuestion, question_id)
    if q is None:
        raise NotFoundError("Pregunta no encontrada")
    return q


def update_question(db: Session, question_id: int, payload: QuestionPatch) -> EvaluationQuestion:
    q = get_question(db, question_id)
    changes = payload.model_dump(exclude_unset=True)
    merged = {
        "tipo_pregunta": changes.get("tipo_pregunta", q.tipo_pregunta),
        "opciones": changes.get("opciones", q.opciones),
        "categoria_id": changes.get("categoria_id"),
        "id_carrera": changes.get("id_carrera"),
    }
    _check_payload(db, merged)
    for key, value in changes.items():
        setattr(q, key, value)
    db.flush()
    return q


def deactivate_question(db: Session, question_id: int) -> EvaluationQuestion:
    q = get_question(db, question_id)
    q.activa = False
    db.flush()
    return q
