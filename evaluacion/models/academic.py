# evaluacion/models/academic.py
from sqlalchemy import (
    Boolean, Column, Date, ForeignKey, Integer, String, UniqueConstraint, true,
)
from sqlalchemy.orm import relationship

from evaluacion.db.base_class import Base


class Faculty(Base):
    __tablename__ = "facultades"
    id = Column(Integer, primary_key=True)
    nombre = Column(String(200), nullable=False)
    codigo = Column(String(30), unique=True, nullable=True)


class Career(Base):
    __tablename__ = "carreras"
    id = Column(Integer, primary_key=True)
    nombre = Column(String(200), nullable=False)
    codigo = Column(String(30), unique=True, nullable=True)
    facultad_id = Column(Integer, ForeignKey("facultades.id", ondelete="SET NULL"), nullable=True, index=True)
    activa = Column(Boolean, nullable=False, default=True, server_default=true())

    facultad = relationship("Faculty")


class AcademicPeriod(Base):
    __tablename__ = "periodos_academicos"
    id = Column(Integer, primary_key=True)
    codigo = Column(String(10), unique=True, nullable=False)  # "2024-1", "2024-2"
    anio = Column(Integer, nullable=False)
    semestre = Column(Integer, nullable=False)
    fecha_inicio = Column(Date, nullable=True)
    fecha_fin = Column(Date, nullable=True)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())


class Course(Base):
    __tablename__ = "cursos"
    id = Column(Integer, primary_key=True)
    nombre = Column(String(200), nullable=False)
    codigo = Column(String(30), nullable=True)
    creditos = Column(Integer, nullable=True)
    carrera_id = Column(Integer, ForeignKey("carreras.id", ondelete="RESTRICT"), nullable=True, index=True)

    carrera = relationship("Career")


class Group(Base):
    __tablename__ = "grupos"
    id = Column(Integer, primary_key=True)
    curso_id = Column(Integer, ForeignKey("cursos.id", ondelete="CASCADE"), nullable=False, index=True)
    periodo_id = Column(Integer, ForeignKey("periodos_academicos.id", ondelete="RESTRICT"), nullable=False, index=True)
    numero_grupo = Column(String(10), nullable=False)
    horario = Column(String(120), nullable=True)
    aula = Column(String(60), nullable=True)

    __table_args__ = (
        UniqueConstraint("curso_id", "periodo_id", "numero_grupo", name="uq_grupo_curso_periodo_numero"),
    )

    curso = relationship("Course")
    periodo = relationship("AcademicPeriod")
