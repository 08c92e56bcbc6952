# evaluacion/services/periods.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from evaluacion.core.errors import ValidationError

_PERIOD_RE = re.compile(r"^(\d{4})-([12])$")


@dataclass(frozen=True)
class PeriodRange:
    """Semestre académico como intervalo semiabierto [start, end)."""
    token: str
    start: datetime
    end: datetime

    @property
    def first_day(self) -> date:
        return self.start.date()

    @property
    def last_day(self) -> date:
        return (self.end - timedelta(days=1)).date()

    def as_dict(self) -> dict[str, str]:
        return {"start": self.first_day.isoformat(), "end": self.last_day.isoformat()}


def period_range(token: Optional[str]) -> Optional[PeriodRange]:
    """
    "YYYY-1" -> enero..junio, "YYYY-2" -> julio..diciembre.
    None o "" -> sin filtro. Cualquier otro formato -> ValidationError (422).
    """
    if token is None or not str(token).strip():
        return None
    raw = str(token).strip()
    m = _PERIOD_RE.match(raw)
    if not m:
        raise ValidationError(
            "Periodo inválido",
            [{"field": "period", "message": "Formato esperado YYYY-1 o YYYY-2"}],
        )
    year, semester = int(m.group(1)), int(m.group(2))
    if semester == 1:
        start, end = datetime(year, 1, 1), datetime(year, 7, 1)
    else:
        start, end = datetime(year, 7, 1), datetime(year + 1, 1, 1)
    return PeriodRange(token=raw, start=start, end=end)
