# evaluacion/services/exports.py
from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from evaluacion.schemas.stats import CareerBreakdownOut

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _header(ws, cols: list[str]) -> None:
    ws.append(cols)
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)


def _fmt_dt(value):
    # openpyxl no acepta datetimes con tz
    return value.replace(tzinfo=None) if value is not None and value.tzinfo else value


def career_report_workbook(report: CareerBreakdownOut) -> bytes:
    wb = Workbook()
    ws_res = wb.active
    ws_res.title = "Resumen"
    _header(ws_res, ["periodo", "total_carreras", "total_evaluaciones",
                     "promedio_general", "carreras_con_evaluaciones"])
    t = report.totals
    ws_res.append([report.period or "todos", t.total_careers, t.total_evaluations,
                   t.average_rating, t.careers_with_evaluations])

    ws_car = wb.create_sheet("Carreras")
    _header(ws_car, ["carrera_id", "carrera", "codigo", "total_evaluaciones",
                     "calificacion_promedio", "profesores_evaluados", "ultima_evaluacion"])
    for r in report.careers:
        ws_car.append([r.career_id, r.name, r.code, r.total_evaluations,
                       r.average_rating, r.professors_evaluated, _fmt_dt(r.last_evaluation_at)])

    ws_cur = wb.create_sheet("Cursos")
    _header(ws_cur, ["curso_id", "curso", "codigo", "n", "promedio"])
    for c in report.overall.per_course:
        ws_cur.append([c.course_id, c.name, c.code, c.count, c.average])

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
