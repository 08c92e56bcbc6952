from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    carrera_id: Optional[int] = None
    codigo_estudiante: Optional[str] = None
    activo: bool


class GroupProfessor(BaseModel):
    id: int
    nombre: str
    evaluated: bool


class EnrolledGroupOut(BaseModel):
    group_id: int
    group_number: str
    period_id: int
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    course_code: Optional[str] = None
    professors: List[GroupProfessor]
