# evaluacion/services/submissions.py
"""
Envío de evaluaciones por estudiantes.

Orden de verificación: rol -> perfil de estudiante -> inscripción en el grupo
-> asignación del profesor al grupo -> calificación y respuestas. La unicidad
(estudiante, profesor, grupo, periodo) la garantiza la restricción de BD.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from evaluacion.core.errors import ConflictError, PermissionDeniedError, ValidationError
from evaluacion.models.evaluation import Evaluation, EvaluationQuestion, EvaluationResponse
from evaluacion.schemas.evaluations import EvaluationCreateIn
from evaluacion.services.access import Caller, ensure_can_submit
from evaluacion.services.audit import audit_log
from evaluacion.services.questions import questions_for_career
from evaluacion.services.resolvers import (
    CourseResolver, GroupResolver, ProfessorResolver, StudentResolver,
)

logger = logging.getLogger(__name__)

LIKERT_MIN, LIKERT_MAX = 1, 5


def _validate_submission(
    questions: list[EvaluationQuestion], payload: EvaluationCreateIn
) -> list[dict[str, str]]:
    """Devuelve TODOS los errores encontrados (lista vacía = válido)."""
    by_id = {q.id: q for q in questions}
    errors: list[dict[str, str]] = []
    seen: set[int] = set()

    if not (LIKERT_MIN <= payload.overall_rating <= LIKERT_MAX):
        errors.append({"field": "overall_rating", "message": "La calificación general debe estar entre 1 y 5"})

    for idx, a in enumerate(payload.answers):
        field = f"answers[{idx}]"
        q = by_id.get(a.question_id)
        if q is None:
            errors.append({"field": field, "message": f"Pregunta {a.question_id} no aplica a este curso"})
            continue
        if a.question_id in seen:
            errors.append({"field": field, "message": f"Pregunta {a.question_id} respondida más de una vez"})
            continue
        seen.add(a.question_id)

        if q.tipo_pregunta == "likert":
            if a.rating is None:
                if q.obligatoria:
                    errors.append({"field": f"{field}.rating", "message": "Calificación requerida"})
            elif not (LIKERT_MIN <= a.rating <= LIKERT_MAX):
                errors.append({"field": f"{field}.rating", "message": "La calificación debe estar entre 1 y 5"})
        elif q.tipo_pregunta == "opcion":
            options = [str(o) for o in (q.opciones or [])]
            if a.option is None:
                if q.obligatoria:
                    errors.append({"field": f"{field}.option", "message": "Opción requerida"})
            elif a.option not in options:
                errors.append({"field": f"{field}.option", "message": f"Opción no válida: {a.option}"})
        else:
            if q.obligatoria and not (a.text or "").strip():
                errors.append({"field": f"{field}.text", "message": "Respuesta de texto requerida"})

    for q in questions:
        if q.obligatoria and q.id not in seen:
            errors.append({"field": "answers", "message": f"Falta respuesta a la pregunta obligatoria {q.id}"})
    return errors


def submit_evaluation(
    db: Session,
    caller: Caller,
    payload: EvaluationCreateIn,
    request: Optional[Request] = None,
) -> Evaluation:
    ensure_can_submit(caller)
    student = StudentResolver(db).require_by_user(caller.user_id)

    # la inscripción se verifica antes de mirar profesor/curso
    if not StudentResolver(db).is_enrolled(student.id, payload.group_id):
        logger.info("Submission rejected: student %s not enrolled in group %s", student.id, payload.group_id)
        raise PermissionDeniedError("No estás inscrito en este grupo")

    professors = ProfessorResolver(db)
    professor = professors.get(payload.professor_id)
    if professor is None or not professors.teaches_group(professor.id, payload.group_id):
        raise PermissionDeniedError("El profesor no está asignado a este grupo")

    group = GroupResolver(db).require(payload.group_id)
    course = CourseResolver(db).get(group.curso_id)
    questions = questions_for_career(db, course.carrera_id if course else None)

    errors = _validate_submission(questions, payload)
    if errors:
        raise ValidationError("La evaluación tiene respuestas inválidas", errors)

    key = (student.id, professor.id, group.id)
    evaluation = Evaluation(
        estudiante_id=student.id,
        profesor_id=professor.id,
        grupo_id=group.id,
        periodo_id=group.periodo_id,
        calificacion_general=float(payload.overall_rating),
        comentarios=(payload.comments or None),
    )
    db.add(evaluation)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("Duplicate evaluation student=%s professor=%s group=%s", *key)
        raise ConflictError("Ya evaluaste a este profesor en este grupo y periodo")

    for a in payload.answers:
        evaluation.respuestas.append(EvaluationResponse(
            pregunta_id=a.question_id,
            calificacion=a.rating,
            respuesta_texto=(a.text or None),
            opcion_seleccionada=a.option,
        ))

    audit_log(
        db,
        user_id=caller.user_id,
        accion="evaluacion.enviar",
        payload={"evaluacion_id": evaluation.id, "profesor_id": professor.id, "grupo_id": group.id},
        request=request,
    )
    db.commit()
    db.refresh(evaluation)
    logger.info("Evaluation %s stored (professor=%s group=%s)", evaluation.id, professor.id, group.id)
    return evaluation
