# evaluacion/models/user.py
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func, true,
)
from sqlalchemy.orm import relationship

from evaluacion.db.base_class import Base


# usuarios (id uuid PK, email unique; baja lógica con activo)
class User(Base):
    __tablename__ = "usuarios"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    nombre = Column(String(120), nullable=True)
    apellido = Column(String(120), nullable=True)
    tipo_usuario = Column(String(30), nullable=True)  # rol "principal" de la cuenta
    activo = Column(Boolean, nullable=False, default=True, server_default=true())
    creado_en = Column(DateTime(timezone=True), server_default=func.now())

    roles = relationship("RoleAssignment", back_populates="user", cascade="all, delete-orphan")

    @property
    def nombre_completo(self) -> str:
        return " ".join(p for p in (self.nombre, self.apellido) if p).strip()


# usuario_roles: una fila por (usuario, rol); revocar = activo false
class RoleAssignment(Base):
    __tablename__ = "usuario_roles"

    id = Column(Integer, primary_key=True)
    usuario_id = Column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    rol = Column(String(30), nullable=False)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())
    fecha_asignacion = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("usuario_id", "rol", name="uq_usuario_roles_usuario_rol"),
    )

    user = relationship("User", back_populates="roles")
