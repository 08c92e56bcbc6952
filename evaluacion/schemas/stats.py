# evaluacion/schemas/stats.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DateRange(BaseModel):
    start: str
    end: str


class CourseBreakdown(BaseModel):
    course_id: int
    name: str
    code: Optional[str] = None
    count: int
    average: float


class RecentEvaluation(BaseModel):
    id: int
    rating: float
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    professor_id: int
    group_id: int
    group_number: Optional[str] = None
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    course_code: Optional[str] = None


class EvaluationStats(BaseModel):
    scope: str  # "professor" | "course" | "career" | "all"
    scope_id: Optional[int] = None
    period: Optional[str] = None
    date_range: Optional[DateRange] = None

    total_evaluations: int = 0
    average_rating: float = 0
    min_rating: float = 0
    max_rating: float = 0
    distinct_students: int = 0
    distinct_professors: int = 0
    distinct_courses: int = 0
    per_course: List[CourseBreakdown] = Field(default_factory=list)
    recent_evaluations: List[RecentEvaluation] = Field(default_factory=list)
    by_month: Dict[str, int] = Field(default_factory=dict)  # "YYYY-MM" -> conteo, ascendente
    last_evaluation_at: Optional[datetime] = None


class ProfessorSummary(BaseModel):
    professor_id: int
    total_evaluations: int = 0
    average_rating: float = 0
    last_evaluation_at: Optional[datetime] = None


class CareerRow(BaseModel):
    career_id: int
    name: str
    code: Optional[str] = None
    total_evaluations: int
    average_rating: float
    professors_evaluated: int
    last_evaluation_at: Optional[datetime] = None


class CareerTotals(BaseModel):
    total_careers: int
    total_evaluations: int
    average_rating: float
    careers_with_evaluations: int


class CareerBreakdownOut(BaseModel):
    period: Optional[str] = None
    date_range: Optional[DateRange] = None
    careers: List[CareerRow]
    totals: CareerTotals
    overall: EvaluationStats


class CareerReportOut(BaseModel):
    career_id: int
    name: Optional[str] = None
    code: Optional[str] = None
    stats: EvaluationStats
    professors: List[ProfessorSummary]


class QuestionAverage(BaseModel):
    question_id: int
    question: str
    category: Optional[str] = None
    responses: int
    average: float


class CourseRatingOut(BaseModel):
    """Promedio de respuestas Likert de un profesor en un curso."""
    professor_id: int
    course_id: int
    period: Optional[str] = None
    date_range: Optional[DateRange] = None
    total_evaluations: int = 0
    total_responses: int = 0
    likert_average: Optional[float] = None  # None sin respuestas Likert
    questions: List[QuestionAverage] = Field(default_factory=list)
