# evaluacion/models/people.py
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func, true,
)
from sqlalchemy.orm import relationship

from evaluacion.db.base_class import Base


class Professor(Base):
    __tablename__ = "profesores"
    id = Column(Integer, primary_key=True)
    usuario_id = Column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True, nullable=False)
    carrera_id = Column(Integer, ForeignKey("carreras.id", ondelete="SET NULL"), nullable=True, index=True)
    codigo_profesor = Column(String(30), nullable=True)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    user = relationship("User")
    carrera = relationship("Career")


class Student(Base):
    __tablename__ = "estudiantes"
    id = Column(Integer, primary_key=True)
    usuario_id = Column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True, nullable=False)
    carrera_id = Column(Integer, ForeignKey("carreras.id", ondelete="SET NULL"), nullable=True, index=True)
    codigo_estudiante = Column(String(30), nullable=True)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    user = relationship("User")
    carrera = relationship("Career")


class Coordinator(Base):
    __tablename__ = "coordinadores"
    id = Column(Integer, primary_key=True)
    usuario_id = Column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    carrera_id = Column(Integer, ForeignKey("carreras.id", ondelete="CASCADE"), nullable=False, index=True)
    departamento = Column(String(200), nullable=True)
    fecha_nombramiento = Column(DateTime(timezone=True), server_default=func.now())
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        UniqueConstraint("usuario_id", "carrera_id", name="uq_coordinador_usuario_carrera"),
    )

    carrera = relationship("Career")


class Dean(Base):
    __tablename__ = "decanos"
    id = Column(Integer, primary_key=True)
    usuario_id = Column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True, nullable=False)
    facultad_id = Column(Integer, ForeignKey("facultades.id", ondelete="SET NULL"), nullable=True)
    fecha_nombramiento = Column(DateTime(timezone=True), server_default=func.now())
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    facultad = relationship("Faculty")


# profesor <-> curso solo a través de esta tabla
class ProfessorAssignment(Base):
    __tablename__ = "asignaciones_profesor"
    id = Column(Integer, primary_key=True)
    profesor_id = Column(Integer, ForeignKey("profesores.id", ondelete="CASCADE"), nullable=False, index=True)
    curso_id = Column(Integer, ForeignKey("cursos.id", ondelete="CASCADE"), nullable=False, index=True)
    grupo_id = Column(Integer, ForeignKey("grupos.id", ondelete="CASCADE"), nullable=False, index=True)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        UniqueConstraint("profesor_id", "grupo_id", name="uq_asignacion_profesor_grupo"),
    )


class Enrollment(Base):
    __tablename__ = "inscripciones"
    id = Column(Integer, primary_key=True)
    estudiante_id = Column(Integer, ForeignKey("estudiantes.id", ondelete="CASCADE"), nullable=False, index=True)
    grupo_id = Column(Integer, ForeignKey("grupos.id", ondelete="CASCADE"), nullable=False, index=True)
    activa = Column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        UniqueConstraint("estudiante_id", "grupo_id", name="uq_inscripcion_estudiante_grupo"),
    )
