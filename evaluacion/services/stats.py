# evaluacion/services/stats.py
"""
Agregación de evaluaciones por profesor, curso, carrera o global.

Se leen las filas crudas del alcance (una consulta) y se resuelven
grupo -> curso en lote (dos IN); el resto es cálculo en Python.
Un profesor/curso/carrera inexistente o inactivo produce estadísticas en cero.
El promedio Likert por curso agrupa en SQL sobre respuestas_evaluacion.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from evaluacion.core.config import settings
from evaluacion.models.academic import Group
from evaluacion.models.evaluation import (
    Evaluation, EvaluationQuestion, EvaluationResponse, QuestionCategory,
)
from evaluacion.models.people import Professor
from evaluacion.schemas.stats import (
    CareerBreakdownOut, CareerRow, CareerTotals, CourseBreakdown, CourseRatingOut,
    DateRange, EvaluationStats, ProfessorSummary, QuestionAverage, RecentEvaluation,
)
from evaluacion.services.periods import PeriodRange, period_range
from evaluacion.services.resolvers import (
    CareerResolver, CourseResolver, GroupResolver, ProfessorResolver,
)

logger = logging.getLogger(__name__)

_EVAL_COLUMNS = (
    Evaluation.id,
    Evaluation.estudiante_id,
    Evaluation.profesor_id,
    Evaluation.grupo_id,
    Evaluation.calificacion_general,
    Evaluation.comentarios,
    Evaluation.fecha_creacion,
)


def _avg(values: Sequence[float]) -> float:
    if not values:
        return 0
    return round(sum(float(v) for v in values) / len(values), 2)


def _date_range(rng: Optional[PeriodRange]) -> Optional[DateRange]:
    return DateRange(**rng.as_dict()) if rng else None


class EvaluationAggregator:
    def __init__(self, db: Session, recent_limit: Optional[int] = None):
        self.db = db
        self.recent_limit = recent_limit or settings.RECENT_EVALUATIONS_LIMIT
        self.professors = ProfessorResolver(db)
        self.courses = CourseResolver(db)
        self.groups = GroupResolver(db)
        self.careers = CareerResolver(db)

    # -------------------- alcances -------------------- #

    def for_professor(self, professor_id: int, period: Optional[str] = None) -> EvaluationStats:
        rng = period_range(period)
        if self.professors.get(professor_id) is None:
            logger.info("Stats requested for unknown professor %s; returning zeroed stats", professor_id)
            return self._empty("professor", professor_id, rng)
        rows = self._rows(rng, Evaluation.profesor_id == professor_id)
        return self._summarize("professor", professor_id, rng, rows)

    def for_course(self, course_id: int, period: Optional[str] = None) -> EvaluationStats:
        rng = period_range(period)
        if self.courses.get(course_id) is None:
            return self._empty("course", course_id, rng)
        group_ids = select(Group.id).where(Group.curso_id == course_id)
        rows = self._rows(rng, Evaluation.grupo_id.in_(group_ids))
        return self._summarize("course", course_id, rng, rows)

    def for_career(self, career_id: int, period: Optional[str] = None) -> EvaluationStats:
        rng = period_range(period)
        if self.careers.get(career_id) is None:
            return self._empty("career", career_id, rng)
        professor_ids = select(Professor.id).where(
            Professor.carrera_id == career_id, Professor.activo.is_(True)
        )
        rows = self._rows(rng, Evaluation.profesor_id.in_(professor_ids))
        return self._summarize("career", career_id, rng, rows)

    def for_all_careers(self, period: Optional[str] = None) -> EvaluationStats:
        rng = period_range(period)
        return self._summarize("all", None, rng, self._rows(rng))

    # -------------------- reportes compuestos -------------------- #

    def professor_summaries(
        self, professor_ids: Iterable[int], period: Optional[str] = None
    ) -> dict[int, ProfessorSummary]:
        """Conteo, promedio y última fecha por profesor en una sola consulta agrupada."""
        wanted = sorted({p for p in professor_ids if p is not None})
        out = {pid: ProfessorSummary(professor_id=pid) for pid in wanted}
        if not wanted:
            return out
        rng = period_range(period)
        stmt = (
            select(
                Evaluation.profesor_id,
                func.count(Evaluation.id),
                func.avg(Evaluation.calificacion_general),
                func.max(Evaluation.fecha_creacion),
            )
            .where(Evaluation.profesor_id.in_(wanted))
            .group_by(Evaluation.profesor_id)
        )
        stmt = self._apply_range(stmt, rng)
        for pid, count, avg, last in self.db.execute(stmt).all():
            out[pid] = ProfessorSummary(
                professor_id=pid,
                total_evaluations=int(count or 0),
                average_rating=round(float(avg), 2) if avg is not None else 0,
                last_evaluation_at=last,
            )
        return out

    def career_breakdown(self, period: Optional[str] = None) -> CareerBreakdownOut:
        rng = period_range(period)
        careers = self.careers.active()

        stmt = (
            select(
                Professor.carrera_id,
                Evaluation.profesor_id,
                Evaluation.calificacion_general,
                Evaluation.fecha_creacion,
            )
            .join(Professor, Professor.id == Evaluation.profesor_id)
            .where(Professor.activo.is_(True))
        )
        stmt = self._apply_range(stmt, rng)

        ratings: dict[int, list[float]] = defaultdict(list)
        profs: dict[int, set[int]] = defaultdict(set)
        last: dict[int, object] = {}
        for career_id, prof_id, rating, created in self.db.execute(stmt).all():
            if career_id is None:
                continue
            ratings[career_id].append(rating)
            profs[career_id].add(prof_id)
            if created is not None and (career_id not in last or created > last[career_id]):
                last[career_id] = created

        rows = [
            CareerRow(
                career_id=c.id,
                name=c.nombre,
                code=c.codigo,
                total_evaluations=len(ratings.get(c.id, [])),
                average_rating=_avg(ratings.get(c.id, [])),
                professors_evaluated=len(profs.get(c.id, set())),
                last_evaluation_at=last.get(c.id),
            )
            for c in careers
        ]
        all_ratings = [r for c in careers for r in ratings.get(c.id, [])]
        totals = CareerTotals(
            total_careers=len(rows),
            total_evaluations=len(all_ratings),
            average_rating=_avg(all_ratings),
            careers_with_evaluations=sum(1 for r in rows if r.total_evaluations > 0),
        )
        return CareerBreakdownOut(
            period=rng.token if rng else None,
            date_range=_date_range(rng),
            careers=rows,
            totals=totals,
            overall=self._summarize("all", None, rng, self._rows(rng)),
        )

    def course_rating(
        self, professor_id: int, course_id: int, period: Optional[str] = None
    ) -> CourseRatingOut:
        """
        Promedio de las respuestas Likert que recibió el profesor en los grupos
        del curso, global y por pregunta. Sin respuestas Likert el promedio es None.
        """
        rng = period_range(period)
        out = CourseRatingOut(
            professor_id=professor_id,
            course_id=course_id,
            period=rng.token if rng else None,
            date_range=_date_range(rng),
        )
        scope = (Evaluation.profesor_id == professor_id, Group.curso_id == course_id)

        count_stmt = (
            select(func.count(Evaluation.id))
            .join(Group, Group.id == Evaluation.grupo_id)
            .where(*scope)
        )
        out.total_evaluations = int(self.db.execute(self._apply_range(count_stmt, rng)).scalar() or 0)
        if not out.total_evaluations:
            return out

        stmt = (
            select(
                EvaluationQuestion.id,
                EvaluationQuestion.texto_pregunta,
                QuestionCategory.nombre,
                func.count(EvaluationResponse.id),
                func.sum(EvaluationResponse.calificacion),
            )
            .select_from(EvaluationResponse)
            .join(Evaluation, Evaluation.id == EvaluationResponse.evaluacion_id)
            .join(Group, Group.id == Evaluation.grupo_id)
            .join(EvaluationQuestion, EvaluationQuestion.id == EvaluationResponse.pregunta_id)
            .outerjoin(QuestionCategory, QuestionCategory.id == EvaluationQuestion.categoria_id)
            .where(
                *scope,
                EvaluationQuestion.tipo_pregunta == "likert",
                EvaluationResponse.calificacion.isnot(None),
            )
            .group_by(
                EvaluationQuestion.id,
                EvaluationQuestion.texto_pregunta,
                EvaluationQuestion.orden,
                QuestionCategory.nombre,
            )
            .order_by(EvaluationQuestion.orden, EvaluationQuestion.id)
        )
        stmt = self._apply_range(stmt, rng)

        total = 0
        for qid, text, category, count, summed in self.db.execute(stmt).all():
            count = int(count or 0)
            summed = float(summed or 0)
            out.questions.append(QuestionAverage(
                question_id=qid,
                question=text,
                category=category,
                responses=count,
                average=round(summed / count, 2) if count else 0,
            ))
            out.total_responses += count
            total += summed
        if out.total_responses:
            out.likert_average = round(total / out.total_responses, 2)
        return out

    # -------------------- internos -------------------- #

    @staticmethod
    def _apply_range(stmt, rng: Optional[PeriodRange]):
        if rng is None:
            return stmt
        return stmt.where(
            Evaluation.fecha_creacion >= rng.start,
            Evaluation.fecha_creacion < rng.end,
        )

    def _rows(self, rng: Optional[PeriodRange], condition=None):
        stmt = select(*_EVAL_COLUMNS).order_by(
            Evaluation.fecha_creacion.desc(), Evaluation.id.desc()
        )
        if condition is not None:
            stmt = stmt.where(condition)
        stmt = self._apply_range(stmt, rng)
        return self.db.execute(stmt).all()

    def _empty(self, scope: str, scope_id: Optional[int], rng: Optional[PeriodRange]) -> EvaluationStats:
        return EvaluationStats(
            scope=scope,
            scope_id=scope_id,
            period=rng.token if rng else None,
            date_range=_date_range(rng),
        )

    def _summarize(self, scope, scope_id, rng, rows) -> EvaluationStats:
        stats = self._empty(scope, scope_id, rng)
        if not rows:
            return stats

        groups = self.groups.many(r.grupo_id for r in rows)
        courses = self.courses.many(g.curso_id for g in groups.values())
        course_by_group = {
            gid: courses[g.curso_id] for gid, g in groups.items() if g.curso_id in courses
        }

        per_course: dict[int, list[float]] = defaultdict(list)
        for r in rows:
            course = course_by_group.get(r.grupo_id)
            if course is not None:
                per_course[course.id].append(r.calificacion_general)

        stats.total_evaluations = len(rows)
        stats.average_rating = _avg([r.calificacion_general for r in rows])
        stats.min_rating = min(float(r.calificacion_general) for r in rows)
        stats.max_rating = max(float(r.calificacion_general) for r in rows)
        stats.distinct_students = len({r.estudiante_id for r in rows if r.estudiante_id is not None})
        stats.distinct_professors = len({r.profesor_id for r in rows if r.profesor_id is not None})
        stats.distinct_courses = len(per_course)
        stats.per_course = sorted(
            (
                CourseBreakdown(
                    course_id=cid,
                    name=courses[cid].nombre,
                    code=courses[cid].codigo,
                    count=len(vals),
                    average=_avg(vals),
                )
                for cid, vals in per_course.items()
            ),
            key=lambda c: (c.name, c.course_id),
        )

        # rows ya viene ordenado por fecha desc, id desc
        recent = []
        for r in rows[: self.recent_limit]:
            group = groups.get(r.grupo_id)
            course = course_by_group.get(r.grupo_id)
            recent.append(RecentEvaluation(
                id=r.id,
                rating=r.calificacion_general,
                comments=r.comentarios,
                created_at=r.fecha_creacion,
                professor_id=r.profesor_id,
                group_id=r.grupo_id,
                group_number=group.numero_grupo if group else None,
                course_id=course.id if course else None,
                course_name=course.nombre if course else None,
                course_code=course.codigo if course else None,
            ))
        stats.recent_evaluations = recent
        by_month: dict[str, int] = defaultdict(int)
        for r in rows:
            if r.fecha_creacion is not None:
                by_month[r.fecha_creacion.strftime("%Y-%m")] += 1
        stats.by_month = dict(sorted(by_month.items()))
        stats.last_evaluation_at = rows[0].fecha_creacion
        return stats
