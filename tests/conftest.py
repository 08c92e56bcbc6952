import os

# Antes de importar la app: BD en memoria y secreto fijo
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime
from types import SimpleNamespace
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from evaluacion.core.security import create_access_token
from evaluacion.db.base import Base
from evaluacion.db.session import get_db
from evaluacion.main import app
from evaluacion.models import (
    AcademicPeriod, Career, Coordinator, Course, Dean, Enrollment, Evaluation,
    EvaluationQuestion, Faculty, Group, Professor, ProfessorAssignment,
    QuestionCategory, RoleAssignment, Student, User,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email, roles=(), nombre=None, tipo=None) -> User:
    user = User(email=email, nombre=nombre or email.split("@")[0].title(), tipo_usuario=tipo)
    db.add(user)
    db.flush()
    for r in roles:
        db.add(RoleAssignment(usuario_id=user.id, rol=r, activo=True))
    db.flush()
    return user


def auth_headers(user_id: UUID) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def add_evaluation(db, professor_id, group_id, rating, when, student_id=None, period_id=None) -> Evaluation:
    if period_id is None:
        period_id = db.get(Group, group_id).periodo_id
    ev = Evaluation(
        estudiante_id=student_id,
        profesor_id=professor_id,
        grupo_id=group_id,
        periodo_id=period_id,
        calificacion_general=rating,
        fecha_creacion=when,
    )
    db.add(ev)
    db.flush()
    return ev


@pytest.fixture
def seed(db):
    """
    Dos carreras (Finanzas, Sistemas), tres cursos, un periodo 2024-1 con un
    grupo por curso, y usuarios para cada rol.
    """
    fac = Faculty(nombre="Facultad de Ingeniería", codigo="FING")
    db.add(fac)
    db.flush()
    fin = Career(nombre="Finanzas", codigo="FIN", facultad_id=fac.id)
    sis = Career(nombre="Sistemas", codigo="SIS", facultad_id=fac.id)
    db.add_all([fin, sis])
    db.flush()

    p1 = AcademicPeriod(codigo="2024-1", anio=2024, semestre=1)
    db.add(p1)
    db.flush()

    c_fin1 = Course(nombre="Finanzas I", codigo="FIN101", creditos=3, carrera_id=fin.id)
    c_fin2 = Course(nombre="Contabilidad", codigo="FIN102", creditos=3, carrera_id=fin.id)
    c_sis1 = Course(nombre="Programación", codigo="SIS101", creditos=4, carrera_id=sis.id)
    db.add_all([c_fin1, c_fin2, c_sis1])
    db.flush()

    g1 = Group(curso_id=c_fin1.id, periodo_id=p1.id, numero_grupo="01")
    g2 = Group(curso_id=c_fin2.id, periodo_id=p1.id, numero_grupo="01")
    g3 = Group(curso_id=c_sis1.id, periodo_id=p1.id, numero_grupo="01")
    db.add_all([g1, g2, g3])
    db.flush()

    admin = make_user(db, "admin@uni.edu.co", ["admin"])
    dean = make_user(db, "decano@uni.edu.co", ["decano"])
    coord = make_user(db, "coord.fin@uni.edu.co", ["coordinador", "profesor"])
    prof_a = make_user(db, "ana@uni.edu.co", ["profesor"], nombre="Ana")
    prof_b = make_user(db, "bruno@uni.edu.co", ["docente"], nombre="Bruno")
    prof_s = make_user(db, "sara@uni.edu.co", ["profesor"], nombre="Sara")
    stud = make_user(db, "est@uni.edu.co", ["estudiante"])
    outsider = make_user(db, "nadie@uni.edu.co", [])

    db.add(Dean(usuario_id=dean.id, facultad_id=fac.id))
    db.add(Coordinator(usuario_id=coord.id, carrera_id=fin.id, departamento="Finanzas"))

    pr_coord = Professor(usuario_id=coord.id, carrera_id=fin.id, codigo_profesor="P-000")
    pr_a = Professor(usuario_id=prof_a.id, carrera_id=fin.id, codigo_profesor="P-001")
    pr_b = Professor(usuario_id=prof_b.id, carrera_id=fin.id, codigo_profesor="P-002")
    pr_s = Professor(usuario_id=prof_s.id, carrera_id=sis.id, codigo_profesor="P-003")
    db.add_all([pr_coord, pr_a, pr_b, pr_s])
    db.flush()

    db.add_all([
        ProfessorAssignment(profesor_id=pr_a.id, curso_id=c_fin1.id, grupo_id=g1.id),
        ProfessorAssignment(profesor_id=pr_a.id, curso_id=c_fin2.id, grupo_id=g2.id),
        ProfessorAssignment(profesor_id=pr_b.id, curso_id=c_fin2.id, grupo_id=g2.id),
        ProfessorAssignment(profesor_id=pr_s.id, curso_id=c_sis1.id, grupo_id=g3.id),
    ])

    st = Student(usuario_id=stud.id, carrera_id=fin.id, codigo_estudiante="E-001")
    db.add(st)
    db.flush()
    db.add(Enrollment(estudiante_id=st.id, grupo_id=g1.id))

    cat = QuestionCategory(nombre="Metodología", orden=1)
    db.add(cat)
    db.flush()
    q_likert = EvaluationQuestion(categoria_id=cat.id, texto_pregunta="Explica con claridad", tipo_pregunta="likert", orden=1)
    q_texto = EvaluationQuestion(categoria_id=cat.id, texto_pregunta="Comentarios adicionales", tipo_pregunta="texto",
                                 obligatoria=False, orden=2)
    q_opcion = EvaluationQuestion(categoria_id=cat.id, texto_pregunta="¿Recomendarías al profesor?", tipo_pregunta="opcion",
                                  opciones=["Sí", "No"], orden=3)
    q_sis = EvaluationQuestion(categoria_id=cat.id, texto_pregunta="Domina el lenguaje", tipo_pregunta="likert",
                               orden=1, id_carrera=sis.id)
    db.add_all([q_likert, q_texto, q_opcion, q_sis])
    db.commit()

    return SimpleNamespace(
        faculty_id=fac.id,
        finance_id=fin.id, systems_id=sis.id,
        period_id=p1.id,
        course_fin1=c_fin1.id, course_fin2=c_fin2.id, course_sis1=c_sis1.id,
        g1=g1.id, g2=g2.id, g3=g3.id,
        admin=admin.id, dean=dean.id, coord=coord.id,
        prof_a_user=prof_a.id, prof_b_user=prof_b.id, prof_s_user=prof_s.id,
        student_user=stud.id, outsider=outsider.id,
        prof_coord=pr_coord.id, prof_a=pr_a.id, prof_b=pr_b.id, prof_s=pr_s.id,
        student=st.id,
        q_likert=q_likert.id, q_texto=q_texto.id, q_opcion=q_opcion.id, q_sis=q_sis.id,
    )


@pytest.fixture
def scenario_a(db, seed):
    """Profesora A: [3, 4, 5] en 2024-1 y [5, 5] en 2024-2."""
    for rating, when in [
        (3, datetime(2024, 2, 10, 9, 0)),
        (4, datetime(2024, 3, 15, 9, 0)),
        (5, datetime(2024, 5, 20, 9, 0)),
        (5, datetime(2024, 8, 1, 9, 0)),
        (5, datetime(2024, 10, 1, 9, 0)),
    ]:
        add_evaluation(db, seed.prof_a, seed.g1, rating, when)
    db.commit()
    return seed
