# evaluacion/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from evaluacion.api.deps.auth import get_caller
from evaluacion.core.permissions import DECANO, dashboard_for_roles
from evaluacion.db.session import get_db
from evaluacion.schemas.auth import CareerRef, DeanRef, MeOut
from evaluacion.services.access import Caller
from evaluacion.services.resolvers import CareerResolver, ProfessorResolver, StudentResolver
from evaluacion.services.roles import active_dean

router = APIRouter(tags=["auth"])


@router.get("/auth/me", response_model=MeOut)
def me(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    user = caller.user
    professor = ProfessorResolver(db).by_user(user.id) if caller.is_professor or caller.is_coordinator else None
    student = StudentResolver(db).by_user(user.id) if caller.is_student else None

    careers = CareerResolver(db).many(caller.career_ids(db))
    dean = active_dean(db, user.id) if DECANO in caller.roles else None

    return MeOut(
        id=user.id,
        email=user.email,
        nombre=user.nombre,
        apellido=user.apellido,
        tipo_usuario=user.tipo_usuario,
        roles=caller.roles,
        permissions=sorted(caller.permissions),
        dashboard=dashboard_for_roles(caller.roles),
        professor_id=professor.id if professor else None,
        student_id=student.id if student else None,
        coordinated_careers=[
            CareerRef(id=c.id, nombre=c.nombre, codigo=c.codigo)
            for c in sorted(careers.values(), key=lambda c: c.id)
        ],
        dean=DeanRef(
            facultad_id=dean.facultad_id,
            facultad_nombre=dean.facultad.nombre if dean.facultad else None,
        ) if dean else None,
    )
