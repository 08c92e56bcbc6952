# evaluacion/api/deps/auth.py
from fastapi import Depends
from sqlalchemy.orm import Session

from evaluacion.core.errors import PermissionDeniedError
from evaluacion.core.permissions import ADMIN, permissions_for_roles
from evaluacion.core.security import get_current_user
from evaluacion.db.session import get_db
from evaluacion.models.user import User
from evaluacion.services.access import Caller
from evaluacion.services.roles import get_active_roles


def get_caller(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Caller:
    """Roles y permisos del usuario, resueltos una vez por request."""
    roles = get_active_roles(db, user.id)
    return Caller(user=user, roles=roles, permissions=permissions_for_roles(roles))


def require_permission(permission: str):
    def _dep(caller: Caller = Depends(get_caller)) -> Caller:
        if not caller.can(permission):
            raise PermissionDeniedError("No tienes permisos para acceder a este recurso")
        return caller
    return _dep


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if ADMIN not in caller.roles:
        raise PermissionDeniedError("Solo administradores")
    return caller
