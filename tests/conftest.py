"""
Test fixtures for the Gera wallet API test suite.

This module provides shared fixtures used across all test files:

  - pass_template: Template built from the test settings (real signer, real images)
  - pass_store: Fresh in-memory pass store for each test
  - image_routes / http_client: Outbound HTTP client backed by httpx.MockTransport,
    serving whatever each test registers in image_routes
  - client: Async HTTP test client with the three fixtures above injected
  - db_engine / db_session: Fresh in-memory SQLite database for each test

Key design decisions:
  - Signing credentials are a throwaway self-signed EC certificate generated
    once per test session and exported through the environment BEFORE the
    application is imported, since gera.config reads settings at import time.
  - We override FastAPI dependencies (store, template, HTTP client) so the
    application code works exactly as it does in production, without the
    lifespan having to run.
"""

import base64
import io
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def _self_signed_credentials() -> tuple[bytes, bytes]:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, "Pass Type ID: pass.br.ufpe.cin.academy.gera"),
    ])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    certificate_pem = certificate.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return certificate_pem, key_pem


TEST_CERTIFICATE_PEM, TEST_PRIVATE_KEY_PEM = _self_signed_credentials()
TEST_CONTACT_EMAIL = "suporte@gera.test"
ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets" / "images"

os.environ["APPLE_DEVELOPER_TEAM_ID"] = "TEAM123456"
os.environ["PASS_CERTIFICATE"] = base64.b64encode(TEST_CERTIFICATE_PEM).decode()
os.environ["PASS_PRIVATE_KEY"] = base64.b64encode(TEST_PRIVATE_KEY_PEM).decode()
os.environ["PASS_PASSPHRASE"] = ""
os.environ["CONTACT_EMAIL"] = TEST_CONTACT_EMAIL
os.environ["TEMPLATE_IMAGES_DIR"] = str(ASSETS_DIR)
os.environ["PASS_STORE_BACKEND"] = "memory"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402

from gera.config import settings  # noqa: E402
from gera.database import Base  # noqa: E402
from gera.dependencies import get_http_client, get_pass_store, get_pass_template  # noqa: E402
from gera.main import app  # noqa: E402
from gera.services.pass_service import build_template  # noqa: E402
from gera.services.pass_store import InMemoryPassStore  # noqa: E402


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def make_png(size: tuple[int, int] = (300, 150), mode: str = "RGBA") -> bytes:
    """Encode a solid test image."""
    color = (200, 30, 60, 128) if mode == "RGBA" else (200, 30, 60)
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def boleto_record():
    """The boleto record used across the HTTP tests."""
    return {
        "type": "boleto",
        "message": "Pague",
        "recipientName": "Ana",
        "recipientPhoneNumber": "+5511999990000",
        "value": "100",
        "boletoDigitableLine": "1234 5678 9012",
        "cpf": "00000000000",
    }


@pytest.fixture
def pass_template():
    """A template built from the test settings."""
    return build_template(settings)


@pytest.fixture
def pass_store():
    return InMemoryPassStore(capacity=100)


@pytest.fixture
def image_routes():
    """URL -> callable(request) returning an httpx.Response (may be async)."""
    return {}


@pytest_asyncio.fixture
async def http_client(image_routes):
    """Outbound client that only reaches the routes registered by the test."""

    def handler(request: httpx.Request):
        route = image_routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        return route(request)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        follow_redirects=True,
    ) as client:
        yield client


@pytest_asyncio.fixture
async def client(pass_template, pass_store, http_client):
    """
    Async HTTP test client with the test template, store and outbound
    client injected in place of the process-wide ones.
    """
    app.dependency_overrides[get_pass_template] = lambda: pass_template
    app.dependency_overrides[get_pass_store] = lambda: pass_store
    app.dependency_overrides[get_http_client] = lambda: http_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session
