"""
Shared fixtures: a throwaway SQLite database per test, factories for users and
projects, a scripted stand-in for the LLM, and an HTTP client bound to the app.
"""
import os

os.environ.setdefault("SECRET", "test-secret-do-not-use-in-production")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sitecraft import llm_client
from sitecraft.database import Base, get_db
from sitecraft.models import User, WebsiteProject

from helpers import BASE_HTML


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sitecraft.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make(credits: int = 20, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            username=f"user{counter['n']}",
            hashed_password="not-a-real-hash",
            credits=credits,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_project(db):
    async def _make(owner: User, code: str = BASE_HTML, published: bool = False, name: str = "Landing") -> WebsiteProject:
        project = WebsiteProject(user_id=owner.id, name=name, current_code=code, is_published=published)
        db.add(project)
        await db.commit()
        return project

    return _make


class FakeOracle:
    """Scripted replacement for the two LLM calls."""

    def __init__(self):
        self.enhanced = "Change the header background color to a blue tone, e.g. #2563eb"
        self.code = BASE_HTML.replace("bg-gray-800", "bg-blue-600")
        self.enhance_error = None
        self.on_generate = None
        self.calls = []

    async def enhance_prompt(self, message):
        self.calls.append(("enhance", message))
        if self.enhance_error:
            raise self.enhance_error
        return self.enhanced

    async def generate_code(self, current_code, instruction):
        self.calls.append(("generate", current_code, instruction))
        if self.on_generate:
            await self.on_generate()
        return self.code


@pytest.fixture
def oracle(monkeypatch):
    fake = FakeOracle()
    monkeypatch.setattr(llm_client, "enhance_prompt", fake.enhance_prompt)
    monkeypatch.setattr(llm_client, "generate_code", fake.generate_code)
    return fake


@pytest.fixture
def app():
    from sitecraft.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app, session_maker):
    async def _get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def login(app):
    from sitecraft.utils import require_authenticated_user

    def _login(user: User):
        user_id = user.id
        app.dependency_overrides[require_authenticated_user] = lambda: SimpleNamespace(id=user_id)

    return _login

