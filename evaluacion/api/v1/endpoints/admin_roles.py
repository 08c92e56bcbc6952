# evaluacion/api/v1/endpoints/admin_roles.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import require_admin
from evaluacion.core.errors import ConflictError, NotFoundError, ValidationError
from evaluacion.core.permissions import ADMIN, KNOWN_ROLES, normalize_role
from evaluacion.db.session import get_db
from evaluacion.models.user import RoleAssignment, User
from evaluacion.schemas.admin_roles import (
    AvailableRolesOut, CoordinatorIn, CoordinatorOut, DeanIn, DeanOut,
    RoleChangeIn, RoleChangeOut, UserRolesOut,
)
from evaluacion.services import roles as role_service
from evaluacion.services.access import Caller
from evaluacion.services.audit import audit_log

router = APIRouter(tags=["admin/roles"])


def _get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def _known_role(raw: str) -> str:
    name = normalize_role(raw)
    if name not in KNOWN_ROLES:
        raise ValidationError(
            f"Rol no existe: {raw}",
            [{"field": "role", "message": f"Roles válidos: {', '.join(KNOWN_ROLES)}"}],
        )
    return name


@router.get("/roles/available", response_model=AvailableRolesOut)
def get_available_roles(_admin: Caller = Depends(require_admin)):
    return AvailableRolesOut(roles=sorted(KNOWN_ROLES))


@router.get("/roles", response_model=UserRolesOut)
def get_user_roles(
    user_id: UUID = Query(..., description="ID del usuario"),
    db: Session = Depends(get_db),
    _admin: Caller = Depends(require_admin),
):
    user = _get_user(db, user_id)
    return UserRolesOut(
        user_id=user.id,
        email=user.email,
        roles=role_service.get_active_roles(db, user.id),
        permissions=sorted(role_service.get_permissions(db, user.id)),
        dashboard=role_service.get_default_dashboard(db, user.id),
    )


@router.post("/roles/grant", response_model=RoleChangeOut)
def grant_role(
    payload: RoleChangeIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: Caller = Depends(require_admin),
):
    user = _get_user(db, payload.user_id)
    role = _known_role(payload.role)
    before = set(role_service.get_active_roles(db, user.id))

    if not role_service.assign_role(db, user.id, role):
        raise ConflictError(f"No se pudo asignar el rol {role}")

    audit_log(db, user_id=admin.user_id, accion="rol.asignar",
              payload={"target_user_id": str(payload.user_id), "rol": role}, request=request)
    db.commit()

    roles_after = role_service.get_active_roles(db, payload.user_id)
    return RoleChangeOut(
        user_id=payload.user_id, role=role,
        action="granted", changed=role not in before,
        roles_after=roles_after,
    )


@router.post("/roles/revoke", response_model=RoleChangeOut)
def revoke_role(
    payload: RoleChangeIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: Caller = Depends(require_admin),
):
    user = _get_user(db, payload.user_id)
    role = _known_role(payload.role)
    before = set(role_service.get_active_roles(db, user.id))

    # no dejar el sistema sin administradores
    if role == ADMIN and ADMIN in before:
        admins = (
            db.query(RoleAssignment)
            .filter(RoleAssignment.rol == ADMIN, RoleAssignment.activo.is_(True))
            .count()
        )
        if admins <= 1:
            raise ConflictError("No se puede remover el último administrador")

    if not role_service.revoke_role(db, user.id, role):
        raise ConflictError(f"No se pudo revocar el rol {role}")

    audit_log(db, user_id=admin.user_id, accion="rol.revocar",
              payload={"target_user_id": str(payload.user_id), "rol": role}, request=request)
    db.commit()

    roles_after = role_service.get_active_roles(db, payload.user_id)
    return RoleChangeOut(
        user_id=payload.user_id, role=role,
        action="revoked", changed=role in before,
        roles_after=roles_after,
    )


@router.post("/coordinators", response_model=CoordinatorOut, status_code=201)
def appoint_coordinator(
    payload: CoordinatorIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: Caller = Depends(require_admin),
):
    _get_user(db, payload.user_id)
    row = role_service.appoint_coordinator(
        db, payload.user_id, payload.career_id,
        departamento=payload.departamento, also_professor=payload.also_professor,
    )
    audit_log(db, user_id=admin.user_id, accion="coordinador.nombrar",
              payload={"target_user_id": str(payload.user_id), "carrera_id": payload.career_id},
              request=request)
    db.commit()
    db.refresh(row)
    return row


@router.post("/deans", response_model=DeanOut, status_code=201)
def appoint_dean(
    payload: DeanIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: Caller = Depends(require_admin),
):
    _get_user(db, payload.user_id)
    row = role_service.appoint_dean(db, payload.user_id, payload.faculty_id)
    audit_log(db, user_id=admin.user_id, accion="decano.nombrar",
              payload={"target_user_id": str(payload.user_id), "facultad_id": payload.faculty_id},
              request=request)
    db.commit()
    db.refresh(row)
    return row
