# evaluacion/core/security.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from evaluacion.core.config import settings
from evaluacion.db.session import get_db
from evaluacion.models.user import User

logger = logging.getLogger(__name__)

# Solo para docs/Swagger; el token lo emite el proveedor de identidad
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(subject: dict[str, Any], expires_minutes: int | None = None) -> str:
    """JWT firmado con "exp" e "iat"; el "sub" (UUID del usuario) viaja como str."""
    now = datetime.now(timezone.utc)
    ttl = timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)

    claims = {k: str(v) if k == "sub" else v for k, v in subject.items()}
    claims.update(iat=int(now.timestamp()), exp=now + ttl)
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decodifica exigiendo 'exp' e 'iat' y verificando expiración."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"], "verify_exp": True},
            leeway=5,  # margen por skew de reloj
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expirado")
    except jwt.InvalidTokenError:
        raise _unauthorized("Token inválido")


def get_current_user(token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """Usuario activo del token; cualquier fallo -> 401 antes de tocar roles."""
    if not token:
        raise _unauthorized("No autenticado")

    payload = decode_token(token)
    sub = payload.get("sub")
    if not sub:
        raise _unauthorized("Token sin sujeto")

    try:
        user_id = UUID(str(sub))
    except ValueError:
        raise _unauthorized("Token con 'sub' inválido")

    user = db.query(User).filter(User.id == user_id, User.activo.is_(True)).first()
    if not user:
        logger.info("Token for unknown or inactive user %s", user_id)
        raise _unauthorized("Usuario no encontrado o inactivo")
    return user
