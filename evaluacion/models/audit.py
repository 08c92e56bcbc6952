# evaluacion/models/audit.py
import uuid

from sqlalchemy import JSON, Column, DateTime, String, Text, Uuid, func

from evaluacion.db.base_class import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id        = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id   = Column(Uuid, index=True, nullable=True)  # actor
    accion    = Column(String, nullable=False)
    payload   = Column(JSON, nullable=True)
    ip        = Column(String, nullable=True)
    ua        = Column(Text, nullable=True)
    creado_en = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
