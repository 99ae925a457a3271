"""
Router principal de la API v1.
Agrupa todos los sub-routers de la versión 1.
"""

from fastapi import APIRouter

from avales.api.v1.avales import router as avales_router

api_v1_router = APIRouter()

api_v1_router.include_router(
    avales_router,
    prefix="/avales",
    tags=["Avales"],
)
