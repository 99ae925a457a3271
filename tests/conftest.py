"""
Fixtures compartidas para Pytest.
Configura base de datos de test y clientes HTTP.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from avales.config import get_settings
from avales.database import Base, get_db
from avales.main import app
from avales.models.secuencia import Secuencia

settings = get_settings()

PAYLOAD_COMPLETO = {
    "fecha_registro": "2026-02-10",
    "fecha_solicitud": "05/02/2026",
    "direccion_administrativa": "Dirección de Tecnologías de la Información",
    "unidad_institucion": "Departamento de Soporte",
    "nombre_solicitante": "María López",
    "cargo": "Analista",
    "responsable": "Juan Pérez",
    "memorando_solicitud": "MEM-DTI-0042-2026",
}


@pytest.fixture
def payload() -> dict:
    """Payload válido con los ocho campos obligatorios."""
    return dict(PAYLOAD_COMPLETO)


# ── Engine de test (SQLite async en archivo temporal) ─
@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Crea y destruye las tablas para cada test, con la secuencia AVAL en 0."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            Secuencia.__table__.insert().values(
                nombre=settings.SEQUENCE_NAME, ultimo_numero=0
            )
        )
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provee una sesión de DB de test."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP de test; cada request usa su propia sesión de la DB de test."""

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
