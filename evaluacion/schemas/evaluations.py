# evaluacion/schemas/evaluations.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------- Envío ----------

class AnswerIn(BaseModel):
    question_id: int
    rating: Optional[int] = None      # likert 1..5 (se valida contra la pregunta)
    text: Optional[str] = None        # tipo "texto"
    option: Optional[str] = None      # tipo "opcion"


class EvaluationCreateIn(BaseModel):
    professor_id: int
    group_id: int
    overall_rating: float  # 1..5, se valida junto con las respuestas
    comments: Optional[str] = Field(None, max_length=2000)
    answers: List[AnswerIn] = Field(default_factory=list)


class AnswerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pregunta_id: int
    calificacion: Optional[int] = None
    respuesta_texto: Optional[str] = None
    opcion_seleccionada: Optional[str] = None


class EvaluationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    estudiante_id: Optional[int] = None
    profesor_id: int
    grupo_id: int
    periodo_id: int
    calificacion_general: float
    comentarios: Optional[str] = None
    fecha_creacion: Optional[datetime] = None
    respuestas: List[AnswerOut] = Field(default_factory=list)


class MyEvaluationOut(BaseModel):
    id: int
    professor_id: int
    professor_name: Optional[str] = None
    group_id: int
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    rating: float
    comments: Optional[str] = None
    created_at: Optional[datetime] = None


# ---------- Preguntas ----------

QuestionType = Literal["likert", "texto", "opcion"]


class QuestionIn(BaseModel):
    texto_pregunta: str = Field(..., min_length=3)
    categoria_id: Optional[int] = None
    descripcion: Optional[str] = None
    tipo_pregunta: QuestionType = "likert"
    opciones: Optional[List[str]] = None
    obligatoria: bool = True
    orden: int = 0
    id_carrera: Optional[int] = None


class QuestionPatch(BaseModel):
    texto_pregunta: Optional[str] = Field(None, min_length=3)
    categoria_id: Optional[int] = None
    descripcion: Optional[str] = None
    tipo_pregunta: Optional[QuestionType] = None
    opciones: Optional[List[str]] = None
    obligatoria: Optional[bool] = None
    orden: Optional[int] = None
    activa: Optional[bool] = None
    id_carrera: Optional[int] = None


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    categoria_id: Optional[int] = None
    texto_pregunta: str
    descripcion: Optional[str] = None
    tipo_pregunta: str
    opciones: Optional[List[Any]] = None
    obligatoria: bool
    orden: int
    activa: bool
    id_carrera: Optional[int] = None


class CourseQuestionOut(BaseModel):
    id: int
    category: Optional[str] = None
    question: str
    type: str
    options: Optional[List[Any]] = None
    required: bool = True
