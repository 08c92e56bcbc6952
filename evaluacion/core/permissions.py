# evaluacion/core/permissions.py
"""
Tabla fija rol -> permisos y prioridad de dashboards.

Funciones puras sobre conjuntos de nombres de rol; el acceso a BD vive en
evaluacion.services.roles.
"""
from __future__ import annotations

from typing import Iterable

ADMIN = "admin"
DECANO = "decano"
COORDINADOR = "coordinador"
PROFESOR = "profesor"
DOCENTE = "docente"
ESTUDIANTE = "estudiante"

PROFESSOR_ROLES = frozenset({PROFESOR, DOCENTE})
KNOWN_ROLES = (ADMIN, COORDINADOR, DECANO, DOCENTE, ESTUDIANTE, PROFESOR)

ALL = "all"
VIEW_EVALUATIONS = "view_evaluations"
CREATE_EVALUATIONS = "create_evaluations"
SUBMIT_EVALUATIONS = "submit_evaluations"
VIEW_REPORTS = "view_reports"
MANAGE_USERS = "manage_users"
MANAGE_DEPARTMENT = "manage_department"
MANAGE_FACULTY = "manage_faculty"
VIEW_ALL_PROFESSORS = "view_all_professors"
VIEW_ALL_CAREERS = "view_all_careers"

_PROFESSOR_PERMS = frozenset({VIEW_EVALUATIONS, CREATE_EVALUATIONS, VIEW_REPORTS})
_COORDINATOR_PERMS = _PROFESSOR_PERMS | {MANAGE_USERS, MANAGE_DEPARTMENT}

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    ADMIN: frozenset({ALL}),
    DECANO: _COORDINATOR_PERMS | {MANAGE_FACULTY, VIEW_ALL_PROFESSORS, VIEW_ALL_CAREERS},
    COORDINADOR: _COORDINATOR_PERMS,
    PROFESOR: _PROFESSOR_PERMS,
    DOCENTE: _PROFESSOR_PERMS,
    ESTUDIANTE: frozenset({VIEW_EVALUATIONS, SUBMIT_EVALUATIONS}),
}

# orden de prioridad: el primer rol presente decide el dashboard
DASHBOARD_PRIORITY: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({ADMIN}), "/dashboard-admin"),
    (frozenset({DECANO}), "/dashboard-decano"),
    (frozenset({COORDINADOR}), "/dashboard-coordinador"),
    (PROFESSOR_ROLES, "/dashboard-profesor"),
    (frozenset({ESTUDIANTE}), "/dashboard-estudiante"),
)
DEFAULT_DASHBOARD = "/dashboard"


def normalize_role(name: str | None) -> str:
    return (name or "").strip().lower()


def permissions_for_roles(roles: Iterable[str]) -> set[str]:
    """Unión de permisos; si hay admin se colapsa a {"all"}."""
    names = {normalize_role(r) for r in roles}
    if ADMIN in names:
        return {ALL}
    perms: set[str] = set()
    for name in names:
        perms |= ROLE_PERMISSIONS.get(name, frozenset())
    return perms


def allows(permissions: Iterable[str], permission: str) -> bool:
    perms = set(permissions)
    return ALL in perms or permission in perms


def dashboard_for_roles(roles: Iterable[str]) -> str:
    names = {normalize_role(r) for r in roles}
    for candidates, path in DASHBOARD_PRIORITY:
        if names & candidates:
            return path
    return DEFAULT_DASHBOARD
