from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from evaluacion.schemas.stats import ProfessorSummary


class CourseRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str
    codigo: Optional[str] = None
    creditos: Optional[int] = None


class TeacherOut(BaseModel):
    id: int
    usuario_id: str
    nombre: str
    email: str
    carrera_id: Optional[int] = None
    codigo_profesor: Optional[str] = None


class TeacherWithCoursesOut(TeacherOut):
    cursos: List[CourseRef] = []
    stats: Optional[ProfessorSummary] = None


class CareerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str
    codigo: Optional[str] = None
    facultad_id: Optional[int] = None


class CareerRosterOut(CareerOut):
    total_profesores: int
    profesores: List[TeacherWithCoursesOut]


class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    curso_id: int
    periodo_id: int
    numero_grupo: str
    horario: Optional[str] = None
    aula: Optional[str] = None


class ByCareerOut(BaseModel):
    career_id: int
    carrera: Optional[CareerOut] = None
    period: Optional[str] = None
    total_profesores: int
    profesores: List[TeacherWithCoursesOut]
