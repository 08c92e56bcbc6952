# evaluacion/core/errors.py
"""
Errores de dominio de la API.

Todos heredan de HTTPException para que un endpoint pueda dejarlos subir sin
traducirlos; el handler registrado en main.py les da la forma
{"detail", "error_code", "errors"?}.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code = "SERVICE_ERROR"

    def __init__(self, detail: str, *, extra: Optional[dict[str, Any]] = None):
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.detail, "error_code": self.error_code}
        body.update(self.extra)
        return body


class NotFoundError(ServiceError):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class PermissionDeniedError(ServiceError):
    status_code_default = status.HTTP_403_FORBIDDEN
    error_code = "PERMISSION_DENIED"


class ConflictError(ServiceError):
    status_code_default = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class ValidationError(ServiceError):
    status_code_default = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, errors: Optional[list[dict[str, str]]] = None):
        self.errors = list(errors or [])
        super().__init__(detail, extra={"errors": self.errors})
