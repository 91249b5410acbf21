"""
Pytest fixtures for image board tests.

Every test gets its own SQLite database file and audit log under tmp_path.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

import pytest
import pytest_asyncio
from sqlalchemy import select

from imageboard.config import RegistrationSettings, Settings
from imageboard.database import build_engine, build_session_maker
from imageboard.jobs import Api, ArgumentSet, JobArgs, RegisterUserJob
from imageboard.kernel.identity import AuthContext
from imageboard.kernel.mail import MemoryMailer
from imageboard.kernel.models import Base, Post, Tag, TagAlias, User, post_tags


@pytest.fixture
def make_settings(tmp_path):
    """Build Settings isolated from the environment and .env files."""

    def _make(
        registration: Optional[Mapping[str, Any]] = None,
        privileges: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> Settings:
        values: Dict[str, Any] = {
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
            "bcrypt_rounds": 4,
            "mail_backend": "memory",
            "audit_log_path": str(tmp_path / "audit.log"),
            "registration": RegistrationSettings(**(registration or {})),
            "privileges": dict(privileges or {}),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def db_engine(settings):
    """Create the schema in a fresh SQLite file."""
    engine = build_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_maker(db_engine)


@pytest.fixture
def mailer() -> MemoryMailer:
    return MemoryMailer()


@pytest.fixture
def make_api(session_factory, settings, mailer):
    """Dispatcher over the test database; settings can be swapped per test."""

    def _make(custom_settings: Optional[Settings] = None, reverse_search=None) -> Api:
        return Api(
            session_factory=session_factory,
            settings=custom_settings or settings,
            mailer=mailer,
            reverse_search=reverse_search,
        )

    return _make


@pytest.fixture
def api(make_api) -> Api:
    return make_api()


@pytest.fixture
def register():
    """Run register-user through a dispatcher."""

    async def _register(
        dispatcher: Api,
        name: str,
        password: str = "secret-password",
        auth: Optional[AuthContext] = None,
        email: Optional[str] = None,
        rank: Optional[str] = None,
    ) -> User:
        arguments = {
            JobArgs.NEW_USER_NAME: name,
            JobArgs.NEW_PASSWORD: password,
            JobArgs.NEW_EMAIL: email,
            JobArgs.NEW_ACCESS_RANK: rank,
        }
        return await dispatcher.run(
            RegisterUserJob(),
            ArgumentSet(arguments),
            auth or AuthContext.anonymous(),
        )

    return _register


@pytest_asyncio.fixture
async def admin(api, register) -> AuthContext:
    """The first account, which is always an admin."""
    user = await register(api, "root", email="root@example.com")
    return AuthContext.for_user(user)


@pytest.fixture
def seed_tags(session_factory):
    """
    Insert tags and the posts carrying them, e.g.
    ``await seed_tags({"cat": [1, 2], "kitty": [2, 3], "unused": []})``.
    """

    async def _seed(tagging: Mapping[str, Iterable[int]], aliases: Optional[Mapping[str, str]] = None):
        tagging = {name: list(ids) for name, ids in tagging.items()}
        async with session_factory() as session:
            async with session.begin():
                for post_id in sorted({pid for ids in tagging.values() for pid in ids}):
                    session.add(Post(
                        id=post_id,
                        name=f"post {post_id}",
                        content_url=f"https://img.example.com/{post_id}.png",
                    ))
                await session.flush()

                tag_ids = {}
                for name, ids in tagging.items():
                    tag = Tag(name=name)
                    session.add(tag)
                    await session.flush()
                    tag_ids[name] = tag.id
                    for post_id in ids:
                        await session.execute(post_tags.insert().values(post_id=post_id, tag_id=tag.id))

                for alias, tag_name in (aliases or {}).items():
                    session.add(TagAlias(name=alias, tag_id=tag_ids[tag_name]))

    return _seed


@pytest.fixture
def load_user(session_factory):
    """Read a user back from the database in a fresh session."""

    async def _load(name: str) -> Optional[User]:
        async with session_factory() as session:
            result = await session.execute(select(User).where(User.name == name))
            return result.scalar_one_or_none()

    return _load
