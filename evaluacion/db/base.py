# evaluacion/db/base.py
# Base con todos los modelos registrados (Alembic / create_all)
from evaluacion.db.base_class import Base  # noqa: F401
import evaluacion.models  # noqa: F401
