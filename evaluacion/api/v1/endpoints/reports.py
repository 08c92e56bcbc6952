# evaluacion/api/v1/endpoints/reports.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import get_caller
from evaluacion.db.session import get_db
from evaluacion.schemas.stats import CareerBreakdownOut, CareerReportOut, EvaluationStats
from evaluacion.services.access import (
    Caller, ensure_all_careers, ensure_career_scope, ensure_course_scope,
)
from evaluacion.services.exports import XLSX_MEDIA_TYPE, career_report_workbook
from evaluacion.services.resolvers import CareerResolver, ProfessorResolver
from evaluacion.services.stats import EvaluationAggregator

router = APIRouter(prefix="/reports", tags=["reports"])

PERIOD_QUERY = Query(None, description="Periodo YYYY-1 (ene-jun) / YYYY-2 (jul-dic)")


# 1) TODAS LAS CARRERAS
@router.get("/careers", response_model=CareerBreakdownOut)
def careers_report(
    period: Optional[str] = PERIOD_QUERY,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_all_careers(caller)
    return EvaluationAggregator(db).career_breakdown(period)


# 2) EXPORT XLSX
@router.get("/careers.xlsx")
def careers_report_xlsx(
    period: Optional[str] = PERIOD_QUERY,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_all_careers(caller)
    report = EvaluationAggregator(db).career_breakdown(period)
    filename = f"resultados_carreras_{report.period or 'todos'}.xlsx"
    return StreamingResponse(
        iter([career_report_workbook(report)]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# 3) UNA CARRERA
@router.get("/careers/{career_id}", response_model=CareerReportOut)
def career_report(
    career_id: int = Path(..., ge=1),
    period: Optional[str] = PERIOD_QUERY,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_career_scope(db, caller, career_id)
    agg = EvaluationAggregator(db)
    stats = agg.for_career(career_id, period)

    career = CareerResolver(db).get(career_id)
    professors = ProfessorResolver(db).in_career(career_id) if career else []
    summaries = agg.professor_summaries([p.id for p in professors], period)
    return CareerReportOut(
        career_id=career_id,
        name=career.nombre if career else None,
        code=career.codigo if career else None,
        stats=stats,
        professors=[summaries[p.id] for p in professors],
    )


# 4) UN CURSO
@router.get("/courses/{course_id}", response_model=EvaluationStats)
def course_report(
    course_id: int = Path(..., ge=1),
    period: Optional[str] = PERIOD_QUERY,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    ensure_course_scope(db, caller, course_id)
    return EvaluationAggregator(db).for_course(course_id, period)
