# evaluacion/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from evaluacion.api.v1.endpoints import (
    admin_roles, auth, evaluations, health, reports, students, teachers,
)
from evaluacion.core.config import settings
from evaluacion.core.errors import ServiceError
from evaluacion.core.logging_config import setup_logging
from evaluacion.db.session import check_db_connection

setup_logging()
logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.APP_NAME,
    description="API para el sistema de evaluación docente",
    version="1.0.0",
)

# CORS (en prod: restringe orígenes con CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


_LOCATIONS = {"body", "query", "path", "header"}


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # misma forma que ValidationError del dominio
    errors = [
        {
            "field": ".".join(str(p) for p in err["loc"] if p not in _LOCATIONS) or "body",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"detail": "Solicitud inválida", "error_code": "VALIDATION_ERROR", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Error interno del servidor", "error_code": "INTERNAL_ERROR"},
    )


# Routers versionados
app.include_router(health.router,      prefix=API_V1_PREFIX)
app.include_router(auth.router,        prefix=API_V1_PREFIX)
app.include_router(teachers.router,    prefix=API_V1_PREFIX)
app.include_router(reports.router,     prefix=API_V1_PREFIX)
app.include_router(evaluations.router, prefix=API_V1_PREFIX)
app.include_router(students.router,    prefix=API_V1_PREFIX)

# Admin: monta AQUÍ el prefijo /api/v1/admin
app.include_router(admin_roles.router, prefix=f"{API_V1_PREFIX}/admin")


# Rutas básicas fuera de /api/v1
@app.get("/health")
def health_root():
    return {"status": "ok", "db": "ok" if check_db_connection() else "error"}


@app.get("/")
def root():
    return {
        "message": "Bienvenido a la API de Evaluación Docente",
        "version": "1.0.0",
        "docs": "/docs",
        "api_v1": API_V1_PREFIX,
    }
