"""
Bitácora de acciones sensibles: cambios de rol, nombramientos y envíos de
evaluación.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from evaluacion.models.audit import AuditLog

logger = logging.getLogger(__name__)

UA_MAX_LEN = 512


def _client_ip(request: Request) -> Optional[str]:
    # detrás de proxy: primer salto de X-Forwarded-For
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def audit_log(
    db: Session,
    *,
    user_id: Optional[UUID],
    accion: str,
    payload: Optional[dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    ip = _client_ip(request) if request else None
    ua = request.headers.get("user-agent") if request else None
    entry = AuditLog(
        user_id=user_id,
        accion=accion,
        payload=payload,
        ip=ip,
        ua=ua[:UA_MAX_LEN] if ua else None,
    )
    db.add(entry)
    logger.info("audit accion=%s actor=%s", accion, user_id)
    # sin commit: viaja en la transacción de quien llama
    return entry
