from datetime import datetime

import pytest

from evaluacion.models import AuditLog, EvaluationResponse

from conftest import add_evaluation, auth_headers


# ---------- estadísticas de profesor ----------

def test_professor_reads_own_stats(client, scenario_a):
    headers = auth_headers(scenario_a.prof_a_user)
    r = client.get(f"/api/v1/teachers/{scenario_a.prof_a}/stats", headers=headers)
    assert r.status_code == 200
    assert r.json()["total_evaluations"] == 5
    assert r.json()["average_rating"] == 4.4

    r = client.get(f"/api/v1/teachers/{scenario_a.prof_a}/stats?period=2024-1", headers=headers)
    assert r.json()["total_evaluations"] == 3
    assert r.json()["average_rating"] == 4.0


def test_professor_cannot_read_other_professor(client, scenario_a):
    r = client.get(
        f"/api/v1/teachers/{scenario_a.prof_a}/stats",
        headers=auth_headers(scenario_a.prof_b_user),
    )
    assert r.status_code == 403


def test_unknown_professor_returns_zeroed_stats(client, seed):
    r = client.get("/api/v1/teachers/987654/stats", headers=auth_headers(seed.dean))
    assert r.status_code == 200
    body = r.json()
    assert body["total_evaluations"] == 0
    assert body["average_rating"] == 0
    assert body["per_course"] == []


def test_coordinator_reads_professors_of_own_career_only(client, seed):
    headers = auth_headers(seed.coord)
    assert client.get(f"/api/v1/teachers/{seed.prof_a}/stats", headers=headers).status_code == 200
    assert client.get(f"/api/v1/teachers/{seed.prof_coord}/stats", headers=headers).status_code == 200
    assert client.get(f"/api/v1/teachers/{seed.prof_s}/stats", headers=headers).status_code == 403


def test_students_cannot_read_aggregates(client, scenario_a):
    headers = auth_headers(scenario_a.student_user)
    assert client.get(f"/api/v1/teachers/{scenario_a.prof_a}/stats", headers=headers).status_code == 403
    assert client.get("/api/v1/reports/careers", headers=headers).status_code == 403


def test_malformed_period_is_422(client, seed):
    r = client.get(f"/api/v1/teachers/{seed.prof_a}/stats?period=2024-7", headers=auth_headers(seed.admin))
    assert r.status_code == 422
    assert r.json()["error_code"] == "VALIDATION_ERROR"


# ---------- alcance por carrera ----------

def test_coordinator_by_career_scope(client, seed):
    headers = auth_headers(seed.coord)
    other = client.get(f"/api/v1/teachers/by-career/{seed.systems_id}", headers=headers)
    assert other.status_code == 403

    own = client.get(f"/api/v1/teachers/by-career/{seed.finance_id}", headers=headers)
    assert own.status_code == 200
    body = own.json()
    assert body["carrera"]["nombre"] == "Finanzas"
    assert body["total_profesores"] == 3
    assert {p["carrera_id"] for p in body["profesores"]} == {seed.finance_id}
    ana = next(p for p in body["profesores"] if p["id"] == seed.prof_a)
    assert [c["codigo"] for c in ana["cursos"]] == ["FIN102", "FIN101"]


def test_dean_reads_any_career(client, seed):
    r = client.get(f"/api/v1/teachers/by-career/{seed.systems_id}", headers=auth_headers(seed.dean))
    assert r.status_code == 200
    assert [p["id"] for p in r.json()["profesores"]] == [seed.prof_s]


def test_unknown_career_is_empty_for_admin(client, seed):
    r = client.get("/api/v1/teachers/by-career/5555", headers=auth_headers(seed.admin))
    assert r.status_code == 200
    assert r.json()["total_profesores"] == 0
    assert r.json()["carrera"] is None


def test_career_report(client, db, seed):
    add_evaluation(db, seed.prof_a, seed.g1, 4, datetime(2024, 3, 1))
    add_evaluation(db, seed.prof_b, seed.g2, 2, datetime(2024, 3, 1))
    db.commit()

    r = client.get(f"/api/v1/reports/careers/{seed.finance_id}", headers=auth_headers(seed.coord))
    assert r.status_code == 200
    body = r.json()
    assert body["stats"]["total_evaluations"] == 2
    assert body["stats"]["average_rating"] == 3.0
    by_id = {p["professor_id"]: p for p in body["professors"]}
    assert by_id[seed.prof_a]["average_rating"] == 4.0
    assert by_id[seed.prof_coord]["total_evaluations"] == 0


# ---------- todas las carreras ----------

def test_all_careers_report_needs_dean_or_admin(client, scenario_a):
    assert client.get("/api/v1/reports/careers", headers=auth_headers(scenario_a.coord)).status_code == 403

    r = client.get("/api/v1/reports/careers?period=2024-1", headers=auth_headers(scenario_a.dean))
    assert r.status_code == 200
    body = r.json()
    assert body["totals"]["total_careers"] == 2
    assert body["totals"]["total_evaluations"] == 3
    assert body["totals"]["careers_with_evaluations"] == 1
    assert body["date_range"] == {"start": "2024-01-01", "end": "2024-06-30"}


def test_careers_xlsx_export(client, scenario_a):
    r = client.get("/api/v1/reports/careers.xlsx", headers=auth_headers(scenario_a.admin))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert r.content[:2] == b"PK"


def test_faculty_roster(client, seed):
    r = client.get("/api/v1/teachers/faculty", headers=auth_headers(seed.dean))
    assert r.status_code == 200
    totals = {c["codigo"]: c["total_profesores"] for c in r.json()}
    assert totals == {"FIN": 3, "SIS": 1}
    assert client.get("/api/v1/teachers/faculty", headers=auth_headers(seed.coord)).status_code == 403


# ---------- cursos ----------

def test_course_report_scopes(client, db, seed):
    add_evaluation(db, seed.prof_s, seed.g3, 5, datetime(2024, 3, 1))
    db.commit()

    assert client.get(
        f"/api/v1/reports/courses/{seed.course_sis1}", headers=auth_headers(seed.prof_s_user)
    ).json()["total_evaluations"] == 1
    assert client.get(
        f"/api/v1/reports/courses/{seed.course_sis1}", headers=auth_headers(seed.prof_a_user)
    ).status_code == 403
    assert client.get(
        f"/api/v1/reports/courses/{seed.course_sis1}", headers=auth_headers(seed.coord)
    ).status_code == 403
    assert client.get(
        f"/api/v1/reports/courses/{seed.course_fin1}", headers=auth_headers(seed.coord)
    ).status_code == 200


# ---------- listados ----------

def test_teacher_listing_per_role(client, seed):
    student = client.get("/api/v1/teachers", headers=auth_headers(seed.student_user)).json()
    assert [t["id"] for t in student] == [seed.prof_a]

    prof = client.get("/api/v1/teachers", headers=auth_headers(seed.prof_b_user)).json()
    assert [t["id"] for t in prof] == [seed.prof_b]

    admin = client.get("/api/v1/teachers", headers=auth_headers(seed.admin)).json()
    assert len(admin) == 4

    assert client.get("/api/v1/teachers", headers=auth_headers(seed.outsider)).status_code == 403


def test_professor_groups_in_course(client, seed):
    r = client.get(
        f"/api/v1/teachers/{seed.prof_a}/courses/{seed.course_fin2}/groups",
        headers=auth_headers(seed.student_user),
    )
    assert [g["id"] for g in r.json()] == [seed.g2]


# ---------- identidad y administración de roles ----------

def test_course_rating_endpoint(client, db, seed):
    ev = add_evaluation(db, seed.prof_a, seed.g1, 4, datetime(2024, 3, 1))
    db.add(EvaluationResponse(evaluacion_id=ev.id, pregunta_id=seed.q_likert, calificacion=4))
    db.commit()
    url = f"/api/v1/teachers/{seed.prof_a}/courses/{seed.course_fin1}/rating"

    r = client.get(url, headers=auth_headers(seed.prof_a_user))
    assert r.status_code == 200
    body = r.json()
    assert body["likert_average"] == 4.0
    assert body["total_responses"] == 1
    assert body["questions"][0]["question_id"] == seed.q_likert

    assert client.get(url, headers=auth_headers(seed.prof_s_user)).status_code == 403
    assert client.get(url, headers=auth_headers(seed.coord)).status_code == 200
    assert client.get(url + "?period=2024-7", headers=auth_headers(seed.admin)).status_code == 422

def test_me_reports_roles_and_dashboard(client, seed):
    body = client.get("/api/v1/auth/me", headers=auth_headers(seed.coord)).json()
    assert body["roles"] == ["coordinador", "profesor"]
    assert body["dashboard"] == "/dashboard-coordinador"
    assert body["professor_id"] == seed.prof_coord
    assert [c["id"] for c in body["coordinated_careers"]] == [seed.finance_id]
    assert "manage_department" in body["permissions"]


def test_admin_grants_and_revokes_roles(client, db, seed):
    headers = auth_headers(seed.admin)
    body = {"user_id": str(seed.outsider), "role": "estudiante"}

    granted = client.post("/api/v1/admin/roles/grant", json=body, headers=headers).json()
    assert granted["changed"] is True
    assert granted["roles_after"] == ["estudiante"]

    again = client.post("/api/v1/admin/roles/grant", json=body, headers=headers).json()
    assert again["changed"] is False

    revoked = client.post("/api/v1/admin/roles/revoke", json=body, headers=headers).json()
    assert revoked["changed"] is True
    assert revoked["roles_after"] == []

    assert db.query(AuditLog).filter(AuditLog.accion.like("rol.%")).count() == 3


@pytest.mark.parametrize("path", ["/api/v1/admin/roles/available", "/api/v1/admin/roles?user_id={uid}"])
def test_role_admin_is_admin_only(client, seed, path):
    url = path.format(uid=seed.outsider)
    assert client.get(url, headers=auth_headers(seed.dean)).status_code == 403
    assert client.get(url, headers=auth_headers(seed.admin)).status_code == 200


def test_last_admin_cannot_be_revoked(client, seed):
    r = client.post(
        "/api/v1/admin/roles/revoke",
        json={"user_id": str(seed.admin), "role": "admin"},
        headers=auth_headers(seed.admin),
    )
    assert r.status_code == 409


def test_unknown_role_is_rejected(client, seed):
    r = client.post(
        "/api/v1/admin/roles/grant",
        json={"user_id": str(seed.outsider), "role": "superuser"},
        headers=auth_headers(seed.admin),
    )
    assert r.status_code == 422


def test_admin_appoints_coordinator_and_dean(client, seed):
    headers = auth_headers(seed.admin)
    r = client.post(
        "/api/v1/admin/coordinators",
        json={"user_id": str(seed.prof_s_user), "career_id": seed.systems_id},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["carrera_id"] == seed.systems_id

    me = client.get("/api/v1/auth/me", headers=auth_headers(seed.prof_s_user)).json()
    assert "coordinador" in me["roles"]

    r = client.post(
        "/api/v1/admin/deans",
        json={"user_id": str(seed.outsider), "faculty_id": seed.faculty_id},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["facultad_id"] == seed.faculty_id


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api/v1/health/db").json() == {"db": "ok"}
