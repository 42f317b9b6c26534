from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from taekwondo_api.auth.services.email_service import (  # noqa: E402
    EmailMessage,
    EmailService,
    get_email_service,
)
from taekwondo_api.auth.services.google_service import (  # noqa: E402
    GoogleIdentity,
    GoogleTokenVerifier,
    get_google_verifier,
)
from taekwondo_api.auth.services.token_service import token_service  # noqa: E402
from taekwondo_api.core.exceptions import UnauthorizedError  # noqa: E402
from taekwondo_api.db.guardian import DatabaseGuardian  # noqa: E402
from taekwondo_api.db.session import Base  # noqa: E402
from taekwondo_api.main import app  # noqa: E402
from tests.utils.factories import create_user_factory  # noqa: E402


class CapturingEmailService(EmailService):
    """Keeps outgoing mail in memory instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []
        self.fail = False

    async def send_email(self, message: EmailMessage) -> bool:
        self.sent.append(message)
        return not self.fail


class FakeGoogleVerifier(GoogleTokenVerifier):
    """Resolves ID tokens from a dict instead of calling Google."""

    def __init__(self) -> None:
        super().__init__(client_id="test-client-id")
        self.identities: dict[str, GoogleIdentity] = {}

    async def verify(self, id_token: str) -> GoogleIdentity:
        identity = self.identities.get(id_token)
        if identity is None:
            raise UnauthorizedError("Invalid Google token")
        return identity


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def guardian(database_url):
    guardian = DatabaseGuardian(database_url, max_retries=1, backoff_base=0)
    assert await guardian.connect()

    async with guardian.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield guardian

    await guardian.stop()


@pytest.fixture
async def db_session(guardian):
    async with guardian.session() as session:
        yield session


@pytest.fixture
def email_outbox():
    return CapturingEmailService()


@pytest.fixture
def google_verifier():
    return FakeGoogleVerifier()


@pytest.fixture
async def test_app(guardian, email_outbox, google_verifier):
    # ASGITransport does not run the lifespan, so the guardian is installed by hand
    app.state.guardian = guardian
    app.dependency_overrides[get_email_service] = lambda: email_outbox
    app.dependency_overrides[get_google_verifier] = lambda: google_verifier

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def test_user(db_session):
    return await create_user_factory(
        db_session, email="test@example.com", password="testpass123", role="user"
    )


@pytest.fixture
async def test_instructor(db_session):
    return await create_user_factory(
        db_session, email="instructor@example.com", password="instructorpass123", role="instructor"
    )


@pytest.fixture
async def test_admin(db_session):
    return await create_user_factory(
        db_session, email="admin@example.com", password="adminpass123", role="admin"
    )


@pytest.fixture
def test_user_token(test_user):
    return token_service.issue(test_user.id)


@pytest.fixture
def test_instructor_token(test_instructor):
    return token_service.issue(test_instructor.id)


@pytest.fixture
def test_admin_token(test_admin):
    return token_service.issue(test_admin.id)
