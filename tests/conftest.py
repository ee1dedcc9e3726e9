import os

os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
os.environ.pop('ADMIN_EMAIL', None)
os.environ.pop('EMAIL_HOST', None)

from datetime import timedelta  # noqa: E402

from httpx import ASGITransport, AsyncClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from moviebooking.core.security import create_access_token  # noqa: E402
from moviebooking.database.database import Base, get_db  # noqa: E402
from moviebooking.main import create_app  # noqa: E402
from moviebooking.model.model import UserRole  # noqa: E402
from moviebooking.notification.email import EmailSender, get_email_sender  # noqa: E402
from moviebooking.services import user_service  # noqa: E402
from tests.util_constant import DEFAULT_PASSWORD, MOVIE_PAYLOAD, SHOW_TIME  # noqa: E402


class RecordingEmailSender(EmailSender):
    """Keeps confirmations in memory instead of talking to SMTP."""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.sent = []

    async def send_booking_confirmation(self, to, name, movie_title, showtime, seats):
        if self.fail:
            raise RuntimeError('SMTP server unavailable')
        self.sent.append(
            {'to': to, 'name': name, 'movie_title': movie_title, 'showtime': showtime, 'seats': seats}
        )


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "test.db"}')
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
async def client(session_maker, email_sender):
    app = create_app(use_lifespan=False)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac


async def _create_user(session_maker, name, email, role=UserRole.USER):
    async with session_maker() as session:
        return await user_service.register_user(session, name, email, DEFAULT_PASSWORD, role=role)


def auth_headers(user) -> dict:
    return {'Authorization': f'Bearer {create_access_token(user)}'}


@pytest.fixture
async def admin_user(session_maker):
    return await _create_user(session_maker, 'Admin', 'admin@example.com', role=UserRole.ADMIN)


@pytest.fixture
async def buyer(session_maker):
    return await _create_user(session_maker, 'Alice', 'alice@example.com')


@pytest.fixture
async def another_buyer(session_maker):
    return await _create_user(session_maker, 'Bob', 'bob@example.com')


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def buyer_headers(buyer):
    return auth_headers(buyer)


@pytest.fixture
def another_buyer_headers(another_buyer):
    return auth_headers(another_buyer)


@pytest.fixture
async def movie(client, admin_headers):
    resp = await client.post('/api/movies', json=MOVIE_PAYLOAD, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
async def showtime(client, admin_headers, movie):
    resp = await client.post(
        '/api/admin/showtimes',
        json={'movieId': movie['id'], 'time': SHOW_TIME.isoformat()},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def later_time():
    return SHOW_TIME + timedelta(hours=3)
