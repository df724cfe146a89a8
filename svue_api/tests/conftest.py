# svue_api/tests/conftest.py
from __future__ import annotations

import base64
import os
from pathlib import Path
from xml.sax.saxutils import escape

# settings are read at import time
TEST_ENKEY = base64.b64encode(b"0123456789abcdef").decode("ascii")
os.environ["ENKEY"] = TEST_ENKEY
os.environ["VERSION_NUMBER"] = "test-version"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from asgi_lifespan import LifespanManager  # noqa: E402

from svue_api.core.config import settings  # noqa: E402
from svue_api.main import app  # noqa: E402
from svue_api.utils.token_crypto import get_token_cipher  # noqa: E402

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    """Every test starts from the same key/version, whatever a .env says."""
    monkeypatch.setattr(settings, "enkey", TEST_ENKEY)
    monkeypatch.setattr(settings, "version_number", "test-version")
    get_token_cipher.cache_clear()
    yield
    get_token_cipher.cache_clear()


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def soap_envelope():
    """Wrap an inner result document the way PXPCommunication.asmx does."""
    def _wrap(result: str) -> str:
        return (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" '
            'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
            'xmlns:xsd="http://www.w3.org/2001/XMLSchema">'
            "<soap:Body>"
            '<ProcessWebServiceRequestResponse xmlns="http://edupoint.com/webservices/">'
            f"<ProcessWebServiceRequestResult>{escape(result)}</ProcessWebServiceRequestResult>"
            "</ProcessWebServiceRequestResponse>"
            "</soap:Body>"
            "</soap:Envelope>"
        )
    return _wrap


@pytest_asyncio.fixture
async def client():
    """
    In-process HTTP client:
    - runs the FastAPI lifespan (shared httpx client)
    - clears dependency overrides afterwards
    """
    async with LifespanManager(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport,
            base_url="http://test",
        ) as ac:
            yield ac

    app.dependency_overrides.clear()
