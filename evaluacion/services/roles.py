# evaluacion/services/roles.py
"""
Roles de usuario (tabla usuario_roles) y permisos derivados.

Las lecturas fallan "cerrado": cualquier error de BD se registra, se hace
rollback y se trata como "sin roles / sin permisos". Las escrituras solo hacen
flush; el commit (junto con la fila de auditoría) lo hace quien llama.
"""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evaluacion.core.errors import NotFoundError, ValidationError
from evaluacion.core.permissions import (
    COORDINADOR, DECANO, KNOWN_ROLES, PROFESOR, PROFESSOR_ROLES,
    allows, dashboard_for_roles, normalize_role, permissions_for_roles,
)
from evaluacion.models.academic import Career, Faculty
from evaluacion.models.people import Coordinator, Dean, Professor
from evaluacion.models.user import RoleAssignment

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


# -------------------- helpers -------------------- #

def _upsert_role(db: Session, user_id: UUID, role: str) -> None:
    """INSERT ... ON CONFLICT (usuario_id, rol) DO UPDATE; sin commit."""
    insert = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        row = db.execute(
            select(RoleAssignment).where(RoleAssignment.usuario_id == user_id, RoleAssignment.rol == role)
        ).scalar_one_or_none()
        if row is None:
            db.add(RoleAssignment(usuario_id=user_id, rol=role, activo=True))
        else:
            row.activo = True
            row.fecha_asignacion = func.now()
        db.flush()
        return

    stmt = insert(RoleAssignment).values(usuario_id=user_id, rol=role, activo=True)
    stmt = stmt.on_conflict_do_update(
        index_elements=["usuario_id", "rol"],
        set_={"activo": True, "fecha_asignacion": func.now()},
    )
    db.execute(stmt)


def _active_role_names(db: Session, user_id: UUID) -> list[str]:
    rows = db.execute(
        select(RoleAssignment.rol)
        .where(RoleAssignment.usuario_id == user_id, RoleAssignment.activo.is_(True))
        .order_by(RoleAssignment.rol.asc())
    ).scalars().all()
    return list(rows)


def ensure_professor_profile(db: Session, user_id: UUID, career_id: Optional[int] = None) -> Professor:
    """Crea o reactiva la fila de profesores del usuario."""
    prof = db.query(Professor).filter(Professor.usuario_id == user_id).first()
    if prof is None:
        prof = Professor(usuario_id=user_id, carrera_id=career_id, activo=True)
        db.add(prof)
    else:
        prof.activo = True
        if career_id is not None:
            prof.carrera_id = career_id
    db.flush()
    return prof


def deactivate_professor_profile(db: Session, user_id: UUID) -> None:
    db.execute(
        update(Professor).where(Professor.usuario_id == user_id).values(activo=False)
    )


# -------------------- escrituras -------------------- #

def assign_role(db: Session, user_id: UUID, role: str) -> bool:
    name = normalize_role(role)
    if name not in KNOWN_ROLES:
        logger.warning("assign_role: unknown role %r for user %s", role, user_id)
        return False
    try:
        _upsert_role(db, user_id, name)
        if name in PROFESSOR_ROLES:
            ensure_professor_profile(db, user_id)
        db.flush()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception("assign_role failed user=%s role=%s", user_id, name)
        return False


def revoke_role(db: Session, user_id: UUID, role: str) -> bool:
    """Baja lógica del rol; la fila nunca se borra."""
    name = normalize_role(role)
    try:
        db.execute(
            update(RoleAssignment)
            .where(RoleAssignment.usuario_id == user_id, RoleAssignment.rol == name)
            .values(activo=False)
        )
        if name in PROFESSOR_ROLES:
            remaining = set(_active_role_names(db, user_id)) & PROFESSOR_ROLES
            if not remaining:
                deactivate_professor_profile(db, user_id)
        db.flush()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception("revoke_role failed user=%s role=%s", user_id, name)
        return False


def appoint_coordinator(
    db: Session,
    user_id: UUID,
    career_id: int,
    departamento: Optional[str] = None,
    also_professor: bool = False,
) -> Coordinator:
    career = db.get(Career, career_id)
    if career is None or not career.activa:
        raise NotFoundError("Carrera no encontrada")

    row = (
        db.query(Coordinator)
        .filter(Coordinator.usuario_id == user_id, Coordinator.carrera_id == career_id)
        .first()
    )
    if row is None:
        row = Coordinator(usuario_id=user_id, carrera_id=career_id, departamento=departamento)
        db.add(row)
    else:
        row.activo = True
        if departamento is not None:
            row.departamento = departamento

    _upsert_role(db, user_id, COORDINADOR)
    if also_professor:
        _upsert_role(db, user_id, PROFESOR)
        ensure_professor_profile(db, user_id, career_id)
    db.flush()
    logger.info("Coordinator appointed user=%s career=%s", user_id, career_id)
    return row


def appoint_dean(db: Session, user_id: UUID, faculty_id: Optional[int] = None) -> Dean:
    if faculty_id is not None and db.get(Faculty, faculty_id) is None:
        raise ValidationError("Facultad inválida", [{"field": "facultad_id", "message": "no existe"}])

    row = db.query(Dean).filter(Dean.usuario_id == user_id).first()
    if row is None:
        row = Dean(usuario_id=user_id, facultad_id=faculty_id)
        db.add(row)
    else:
        row.activo = True
        row.facultad_id = faculty_id
    _upsert_role(db, user_id, DECANO)
    db.flush()
    logger.info("Dean appointed user=%s faculty=%s", user_id, faculty_id)
    return row


# -------------------- lecturas (fail-closed) -------------------- #

def get_active_roles(db: Session, user_id: UUID) -> list[str]:
    try:
        return _active_role_names(db, user_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("get_active_roles failed user=%s", user_id)
        return []


def has_role(db: Session, user_id: UUID, role: str) -> bool:
    try:
        found = db.execute(
            select(RoleAssignment.id).where(
                RoleAssignment.usuario_id == user_id,
                RoleAssignment.rol == normalize_role(role),
                RoleAssignment.activo.is_(True),
            )
        ).first()
        return found is not None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("has_role failed user=%s role=%s", user_id, role)
        return False


def get_permissions(db: Session, user_id: UUID) -> set[str]:
    return permissions_for_roles(get_active_roles(db, user_id))


def can_access(db: Session, user_id: UUID, permission: str) -> bool:
    return allows(get_permissions(db, user_id), permission)


def get_default_dashboard(db: Session, user_id: UUID) -> str:
    return dashboard_for_roles(get_active_roles(db, user_id))


def coordinated_career_ids(db: Session, user_id: UUID) -> list[int]:
    try:
        rows = db.execute(
            select(Coordinator.carrera_id)
            .where(Coordinator.usuario_id == user_id, Coordinator.activo.is_(True))
            .order_by(Coordinator.carrera_id)
        ).scalars().all()
        return list(rows)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("coordinated_career_ids failed user=%s", user_id)
        return []


def active_dean(db: Session, user_id: UUID) -> Optional[Dean]:
    try:
        return (
            db.query(Dean)
            .filter(Dean.usuario_id == user_id, Dean.activo.is_(True))
            .first()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("active_dean failed user=%s", user_id)
        return None
