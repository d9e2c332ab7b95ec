import os
import uuid

# Test environment, set before vidvault.config reads it
os.environ.setdefault("ENV", "test")
os.environ["ADMIN_EMAILS"] = ""
os.environ.pop("ADMIN_EMAIL", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from vidvault.config import settings
from vidvault.core import db as db_module
from vidvault.core.rate_limit import limiter
from vidvault.core.security import create_access_token
from vidvault.main import app
from vidvault.models.user import User
from vidvault.models.video import Video, VideoStatus
from vidvault.services.auth_service import AuthService
from vidvault.services.catalog_service import CatalogService
from vidvault.services.mailer import EmailSender, MailDeliveryError
from vidvault.services.user_service import UserService


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


class RecordingMailer(EmailSender):
    """
    EmailSender that keeps messages in memory instead of talking to SMTP.
    Set `fail = True` to make every delivery raise MailDeliveryError.
    """

    def __init__(self, settings=settings):
        super().__init__(settings)
        self.sent: list[dict] = []
        self.codes: dict[str, list[str]] = {}
        self.fail = False

    async def _send(self, to_email: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailDeliveryError("smtp down")
        self.sent.append({"to": to_email, "subject": subject, "html": html})

    async def send_login_token(self, email: str, code: str) -> None:
        self.codes.setdefault(email, []).append(code)
        await super().send_login_token(email, code)

    def last_code(self, email: str) -> str:
        return self.codes[email][-1]


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh schema without an HTTP client, for service-level tests."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def mailer():
    return RecordingMailer(settings)


@pytest.fixture
def auth_service(mailer):
    return AuthService(UserService(), mailer, settings)


@pytest.fixture
def catalog():
    return CatalogService()


@pytest_asyncio.fixture
async def client(mailer, auth_service):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB,
    a recording mailer and cleared rate-limit counters.
    """
    await _init_test_db()
    limiter.reset()
    app.state.mailer = mailer
    app.state.user_service = auth_service.users
    app.state.auth_service = auth_service
    app.state.catalog_service = CatalogService()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(email: str | None = None, **fields) -> User:
        return await User.create(email=email or f"{uuid.uuid4().hex[:8]}@example.com", **fields)

    return _create_user


@pytest_asyncio.fixture
async def create_video():
    """
    Factory fixture for catalog entries. Published and active unless overridden.
    """

    async def _create_video(**fields) -> Video:
        data = {
            "title": f"Video {uuid.uuid4().hex[:6]}",
            "url": "https://cdn.example.com/v.mp4",
            "duration": "01:40",
            "duration_seconds": 100,
            "status": VideoStatus.PUBLISHED,
        }
        data.update(fields)
        return await Video.create(**data)

    return _create_video


@pytest.fixture
def auth_headers():
    """Authorization header for a user, minted directly (no login round trip)."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(str(user.id), user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def login(client, mailer):
    """
    Helper fixture that runs the real request-token / validate-token flow and
    returns Authorization headers.
    """

    async def _login(email: str) -> dict[str, str]:
        resp = await client.post("/api/v1/auth/request-token", json={"email": email})
        assert resp.status_code == 200, resp.text
        code = mailer.last_code(email.lower())
        resp = await client.post("/api/v1/auth/validate-token", json={"email": email, "code": code})
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _login
