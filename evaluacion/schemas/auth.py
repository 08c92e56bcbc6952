# evaluacion/schemas/auth.py
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr


class CareerRef(BaseModel):
    id: int
    nombre: str
    codigo: Optional[str] = None


class DeanRef(BaseModel):
    facultad_id: Optional[int] = None
    facultad_nombre: Optional[str] = None


class MeOut(BaseModel):
    id: UUID
    email: EmailStr
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    tipo_usuario: Optional[str] = None
    roles: List[str]
    permissions: List[str]
    dashboard: str
    professor_id: Optional[int] = None
    student_id: Optional[int] = None
    coordinated_careers: List[CareerRef] = []
    dean: Optional[DeanRef] = None
