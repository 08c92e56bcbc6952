import itertools

import pytest

from evaluacion.core.permissions import (
    ALL, DEFAULT_DASHBOARD, ROLE_PERMISSIONS, allows, dashboard_for_roles, permissions_for_roles,
)


@pytest.mark.parametrize("permission", [
    "view_evaluations", "submit_evaluations", "manage_faculty", "view_all_careers", "anything_else",
])
def test_admin_satisfies_every_permission(permission):
    perms = permissions_for_roles(["estudiante", "admin"])
    assert perms == {ALL}
    assert allows(perms, permission)


def test_dashboard_does_not_depend_on_assignment_order():
    roles = ["estudiante", "profesor", "coordinador"]
    results = {dashboard_for_roles(p) for p in itertools.permutations(roles)}
    assert results == {"/dashboard-coordinador"}


@pytest.mark.parametrize("roles, expected", [
    (["admin", "decano"], "/dashboard-admin"),
    (["coordinador", "decano"], "/dashboard-decano"),
    (["profesor", "coordinador"], "/dashboard-coordinador"),
    (["docente"], "/dashboard-profesor"),
    (["estudiante"], "/dashboard-estudiante"),
    ([], DEFAULT_DASHBOARD),
    (["invitado"], DEFAULT_DASHBOARD),
])
def test_dashboard_priority(roles, expected):
    assert dashboard_for_roles(roles) == expected


def test_professor_and_instructor_share_permissions():
    assert permissions_for_roles(["profesor"]) == permissions_for_roles(["docente"])
    assert permissions_for_roles(["docente"]) == {"view_evaluations", "create_evaluations", "view_reports"}


def test_dean_permissions_include_all_careers():
    perms = permissions_for_roles(["decano"])
    assert perms == set(ROLE_PERMISSIONS["decano"])
    assert len(perms) == 8
    assert allows(perms, "view_all_careers")
    assert not allows(perms, "submit_evaluations")


def test_union_of_roles():
    perms = permissions_for_roles(["estudiante", "profesor"])
    assert {"submit_evaluations", "view_reports"} <= perms


def test_unknown_or_empty_roles_grant_nothing():
    assert permissions_for_roles([]) == set()
    assert permissions_for_roles(["superuser"]) == set()
    assert not allows(set(), "view_evaluations")


def test_role_names_are_normalized():
    assert permissions_for_roles([" Admin "]) == {ALL}
