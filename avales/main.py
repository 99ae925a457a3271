"""
Punto de entrada de la aplicación FastAPI.
Configura CORS, logging, manejo de errores y monta los routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from avales.api.v1.router import api_v1_router
from avales.config import get_settings
from avales.core.exceptions import AvalException, ValidationException
from avales.database import async_session_factory
from avales.services import sequence_service

settings = get_settings()
logger = logging.getLogger(__name__)


# ── Lifecycle ────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Eventos de inicio y cierre de la aplicación."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"{settings.APP_NAME} iniciando en modo {settings.APP_ENV}")

    # La secuencia debe existir antes de atender el primer registro
    async with async_session_factory() as session:
        await sequence_service.ensure_sequence(session, settings.SEQUENCE_NAME)

    yield
    logger.info(f"{settings.APP_NAME} cerrando...")


# ── App ──────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    description="API para el registro de correlativos de avales técnicos",
    version="0.1.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Errores de negocio ───────────────────────────────
@app.exception_handler(AvalException)
async def aval_exception_handler(request: Request, exc: AvalException):
    """Convierte los errores de dominio en rechazos estructurados."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Errores de tipo en body/query con la misma forma que ValidationException."""
    fields: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        field = str(loc[-1]) if len(loc) > 1 else str(loc[0])
        if field not in fields:
            fields.append(field)
    return await aval_exception_handler(request, ValidationException(fields=fields))


# ── Global Exception Handler ────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Captura excepciones no manejadas para evitar exponer detalles internos."""
    logger.error(f"Error no manejado en {request.url.path}: {exc!r}")
    if settings.DEBUG:
        # En desarrollo, mostrar detalles
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "type": type(exc).__name__},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Error interno del servidor"},
    )


# ── Routers ──────────────────────────────────────────
app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


# ── Health Check ─────────────────────────────────────
@app.get("/health", tags=["Health"])
async def health_check():
    """Endpoint de health check para monitoreo."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "0.1.0",
        "environment": settings.APP_ENV,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("avales.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
