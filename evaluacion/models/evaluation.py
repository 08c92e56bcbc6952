# evaluacion/models/evaluation.py
from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String,
    Text, UniqueConstraint, func, true,
)
from sqlalchemy.orm import relationship

from evaluacion.db.base_class import Base

QUESTION_TYPES = ("likert", "texto", "opcion")


class QuestionCategory(Base):
    __tablename__ = "categorias_pregunta"
    id = Column(Integer, primary_key=True)
    nombre = Column(String(120), nullable=False, unique=True)
    descripcion = Column(Text, nullable=True)
    orden = Column(Integer, nullable=False, default=0, server_default="0")


class EvaluationQuestion(Base):
    __tablename__ = "preguntas_evaluacion"
    id = Column(Integer, primary_key=True)
    categoria_id = Column(Integer, ForeignKey("categorias_pregunta.id", ondelete="SET NULL"), nullable=True)
    texto_pregunta = Column(Text, nullable=False)
    descripcion = Column(Text, nullable=True)
    tipo_pregunta = Column(String(20), nullable=False, default="likert", server_default="likert")
    opciones = Column(JSON, nullable=True)  # solo para tipo "opcion"
    obligatoria = Column(Boolean, nullable=False, default=True, server_default=true())
    orden = Column(Integer, nullable=False, default=0, server_default="0")
    activa = Column(Boolean, nullable=False, default=True, server_default=true())
    id_carrera = Column(Integer, ForeignKey("carreras.id", ondelete="CASCADE"), nullable=True, index=True)  # NULL = general

    categoria = relationship("QuestionCategory")


# append-only: no hay endpoint de edición
class Evaluation(Base):
    __tablename__ = "evaluaciones"
    id = Column(Integer, primary_key=True)
    estudiante_id = Column(Integer, ForeignKey("estudiantes.id", ondelete="SET NULL"), nullable=True, index=True)
    profesor_id = Column(Integer, ForeignKey("profesores.id", ondelete="CASCADE"), nullable=False, index=True)
    grupo_id = Column(Integer, ForeignKey("grupos.id", ondelete="CASCADE"), nullable=False, index=True)
    periodo_id = Column(Integer, ForeignKey("periodos_academicos.id", ondelete="RESTRICT"), nullable=False, index=True)
    calificacion_general = Column(Float, nullable=False)
    comentarios = Column(Text, nullable=True)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint(
            "estudiante_id", "profesor_id", "grupo_id", "periodo_id",
            name="uq_evaluacion_estudiante_profesor_grupo_periodo",
        ),
        CheckConstraint(
            "calificacion_general >= 1 AND calificacion_general <= 5",
            name="ck_evaluacion_calificacion_rango",
        ),
    )

    respuestas = relationship("EvaluationResponse", back_populates="evaluacion", cascade="all, delete-orphan")


class EvaluationResponse(Base):
    __tablename__ = "respuestas_evaluacion"
    id = Column(Integer, primary_key=True)
    evaluacion_id = Column(Integer, ForeignKey("evaluaciones.id", ondelete="CASCADE"), nullable=False, index=True)
    pregunta_id = Column(Integer, ForeignKey("preguntas_evaluacion.id", ondelete="RESTRICT"), nullable=False)
    calificacion = Column(Integer, nullable=True)
    respuesta_texto = Column(Text, nullable=True)
    opcion_seleccionada = Column(String(200), nullable=True)

    __table_args__ = (
        UniqueConstraint("evaluacion_id", "pregunta_id", name="uq_respuesta_evaluacion_pregunta"),
    )

    evaluacion = relationship("Evaluation", back_populates="respuestas")
