# evaluacion/schemas/admin_roles.py
from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class RoleChangeIn(BaseModel):
    user_id: UUID
    role: str = Field(..., description="Nombre del rol, p.ej. 'coordinador'")


class RoleChangeOut(BaseModel):
    user_id: UUID
    role: str
    action: str  # "granted" | "revoked"
    changed: bool
    roles_after: List[str]


class UserRolesOut(BaseModel):
    user_id: UUID
    email: str
    roles: List[str]
    permissions: List[str]
    dashboard: str


class AvailableRolesOut(BaseModel):
    roles: List[str]


class CoordinatorIn(BaseModel):
    user_id: UUID
    career_id: int
    departamento: Optional[str] = None
    also_professor: bool = False


class CoordinatorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    usuario_id: UUID
    carrera_id: int
    departamento: Optional[str] = None
    fecha_nombramiento: Optional[datetime] = None
    activo: bool


class DeanIn(BaseModel):
    user_id: UUID
    faculty_id: Optional[int] = None


class DeanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    usuario_id: UUID
    facultad_id: Optional[int] = None
    fecha_nombramiento: Optional[datetime] = None
    activo: bool
