# evaluacion/models/__init__.py
# Registra todos los mapeos para que las relaciones por nombre resuelvan
from evaluacion.models.user import User, RoleAssignment  # noqa: F401
from evaluacion.models.academic import Faculty, Career, AcademicPeriod, Course, Group  # noqa: F401
from evaluacion.models.people import (  # noqa: F401
    Professor, Student, Coordinator, Dean, ProfessorAssignment, Enrollment,
)
from evaluacion.models.evaluation import (  # noqa: F401
    QuestionCategory, EvaluationQuestion, Evaluation, EvaluationResponse,
)
from evaluacion.models.audit import AuditLog  # noqa: F401
