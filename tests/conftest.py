import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment must be ready first
_TMP_DIR = Path(tempfile.mkdtemp(prefix="techstore-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'techstore.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_PRODUCTS"] = "false"
os.environ["TOKEN_REVOCATION_CHECK"] = "false"
os.environ["SQUARE_ENVIRONMENT"] = "sandbox"
os.environ["SQUARE_APPLICATION_ID"] = "sandbox-sq0idb-test"
os.environ["SQUARE_LOCATION_ID"] = "LOC123"
os.environ["SQUARE_ACCESS_TOKEN"] = "sq-test-token"
os.environ["OTLP_ENDPOINT"] = ""

import httpx  # noqa: E402
import pytest  # noqa: E402

from main import app  # noqa: E402
from services.checkout_service.gateway import PaymentGateway, get_payment_gateway  # noqa: E402
from services.product_service.seed import seed_products  # noqa: E402
from shared.config.database import AsyncSessionLocal, create_tables, drop_tables, engine  # noqa: E402


class FakeSquare:
    """Stands in for the Square payments endpoint and records what it was sent."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = None
        self.error = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        body = self.body
        if body is None:
            body = {"payment": {"id": f"pay_{len(self.requests)}", "status": "COMPLETED"}}
        return httpx.Response(self.status_code, json=body)


@pytest.fixture
async def db_setup():
    await create_tables()
    async with AsyncSessionLocal() as session:
        await seed_products(session)
    yield
    await drop_tables()
    await engine.dispose()


@pytest.fixture
async def db(db_setup):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def square():
    fake = FakeSquare()
    gateway = PaymentGateway(
        access_token="sq-test-token",
        location_id="LOC123",
        environment="sandbox",
        transport=httpx.MockTransport(fake.handler),
    )
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture
async def client(db_setup):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def register(client):
    async def _register(email="shopper@example.com", password="pbkdf2-digest-1", name="Shopper"):
        resp = await client.post(
            "/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.text
        # Tests pass credentials explicitly
        client.cookies.clear()
        body = resp.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register


@pytest.fixture
async def shopper(register):
    return await register()
