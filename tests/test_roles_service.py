from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from evaluacion.core.errors import NotFoundError
from evaluacion.models import Coordinator, Dean, Professor, RoleAssignment
from evaluacion.services import roles as role_service

from conftest import make_user


@pytest.fixture
def user(db):
    u = make_user(db, "maria@uni.edu.co")
    db.commit()
    return u.id


def test_active_roles_reflect_latest_assignments(db, user):
    assert role_service.assign_role(db, user, "profesor")
    assert role_service.assign_role(db, user, "coordinador")
    assert role_service.get_active_roles(db, user) == ["coordinador", "profesor"]

    assert role_service.revoke_role(db, user, "coordinador")
    assert role_service.get_active_roles(db, user) == ["profesor"]


def test_assigning_active_role_is_idempotent(db, user):
    assert role_service.assign_role(db, user, "estudiante")
    assert role_service.assign_role(db, user, "Estudiante")
    assert role_service.get_active_roles(db, user) == ["estudiante"]
    assert db.query(RoleAssignment).filter(RoleAssignment.usuario_id == user).count() == 1


def test_revoke_keeps_row_and_reassign_reactivates(db, user):
    role_service.assign_role(db, user, "decano")
    role_service.revoke_role(db, user, "decano")

    row = db.query(RoleAssignment).filter(RoleAssignment.usuario_id == user).one()
    assert row.activo is False

    role_service.assign_role(db, user, "decano")
    db.refresh(row)
    assert row.activo is True
    assert role_service.has_role(db, user, "decano")


def test_unknown_role_is_not_assigned(db, user):
    assert role_service.assign_role(db, user, "superuser") is False
    assert role_service.get_active_roles(db, user) == []


def test_professor_role_manages_professor_profile(db, user):
    role_service.assign_role(db, user, "profesor")
    prof = db.query(Professor).filter(Professor.usuario_id == user).one()
    assert prof.activo is True

    role_service.assign_role(db, user, "docente")
    role_service.revoke_role(db, user, "profesor")
    db.refresh(prof)
    assert prof.activo is True  # aún tiene "docente"

    role_service.revoke_role(db, user, "docente")
    db.refresh(prof)
    assert prof.activo is False


def test_permissions_and_dashboard(db, user):
    role_service.assign_role(db, user, "profesor")
    assert role_service.can_access(db, user, "view_reports")
    assert not role_service.can_access(db, user, "view_all_careers")
    assert role_service.get_default_dashboard(db, user) == "/dashboard-profesor"

    role_service.assign_role(db, user, "admin")
    assert role_service.get_permissions(db, user) == {"all"}
    assert role_service.can_access(db, user, "view_all_careers")
    assert role_service.get_default_dashboard(db, user) == "/dashboard-admin"


def test_user_without_roles_gets_fallback_dashboard(db, user):
    assert role_service.get_default_dashboard(db, user) == "/dashboard"
    assert role_service.get_permissions(db, user) == set()


def test_lookups_fail_closed_on_database_errors():
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    uid = uuid4()

    assert role_service.get_active_roles(broken, uid) == []
    assert role_service.has_role(broken, uid, "admin") is False
    assert role_service.get_permissions(broken, uid) == set()
    assert role_service.can_access(broken, uid, "view_reports") is False
    assert role_service.get_default_dashboard(broken, uid) == "/dashboard"
    # cada lectura fallida deja la sesión utilizable
    assert broken.rollback.call_count == 5


def test_assign_returns_false_on_database_error():
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("INSERT", {}, Exception("db down"))
    assert role_service.assign_role(broken, uuid4(), "profesor") is False
    broken.rollback.assert_called_once()


def test_appoint_coordinator_also_as_professor(db, seed, user):
    row = role_service.appoint_coordinator(
        db, user, seed.finance_id, departamento="Finanzas", also_professor=True,
    )
    assert row.activo is True
    assert role_service.get_active_roles(db, user) == ["coordinador", "profesor"]
    assert role_service.coordinated_career_ids(db, user) == [seed.finance_id]
    prof = db.query(Professor).filter(Professor.usuario_id == user).one()
    assert prof.carrera_id == seed.finance_id

    # reactivación en lugar de duplicado
    row.activo = False
    db.commit()
    role_service.appoint_coordinator(db, user, seed.finance_id)
    assert db.query(Coordinator).filter(Coordinator.usuario_id == user).count() == 1
    assert role_service.coordinated_career_ids(db, user) == [seed.finance_id]


def test_appoint_coordinator_unknown_career(db, user):
    with pytest.raises(NotFoundError):
        role_service.appoint_coordinator(db, user, 9999)


def test_appoint_dean(db, seed, user):
    row = role_service.appoint_dean(db, user, seed.faculty_id)
    assert row.facultad_id == seed.faculty_id
    assert role_service.has_role(db, user, "decano")
    assert role_service.active_dean(db, user).id == row.id


def test_career_and_dean_lookups_roll_back_on_database_errors():
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    broken.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    uid = uuid4()

    assert role_service.coordinated_career_ids(broken, uid) == []
    assert role_service.active_dean(broken, uid) is None
    assert broken.rollback.call_count == 2


def test_role_changes_wait_for_caller_commit(db, user):
    assert role_service.assign_role(db, user, "profesor")
    assert role_service.get_active_roles(db, user) == ["profesor"]

    db.rollback()
    assert role_service.get_active_roles(db, user) == []
    assert db.query(Professor).filter(Professor.usuario_id == user).count() == 0


def test_appointment_is_discarded_if_caller_rolls_back(db, seed, user):
    role_service.appoint_dean(db, user, seed.faculty_id)
    db.rollback()

    assert db.query(Dean).filter(Dean.usuario_id == user).count() == 0
    assert not role_service.has_role(db, user, "decano")
