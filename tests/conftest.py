"""Shared fixtures for partnerstore tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import Session, SQLModel, create_engine

from partnerstore.dialect import enable_sqlite_foreign_keys
from partnerstore.models import User
from partnerstore.store import PartnerStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite engine with all tables created and foreign keys on."""
    eng = create_engine("sqlite://", echo=False)
    enable_sqlite_foreign_keys(eng)
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """SQLModel session bound to the in-memory engine, rolled back after each test."""
    with Session(engine) as s:
        s.begin()
        yield s
        s.rollback()


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with all tables created and foreign keys on."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    enable_sqlite_foreign_keys(eng)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Async SQLModel session, rolled back after each test."""
    factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def store() -> PartnerStore:
    return PartnerStore()


@pytest.fixture
def make_user(async_session: AsyncSession) -> Callable[[str], Awaitable[User]]:
    """Factory adding a live user named *name* (``name@example.com``)."""

    async def _make(name: str) -> User:
        user = User(email=f"{name}@example.com", name=name.title())
        async_session.add(user)
        await async_session.flush()
        return user

    return _make


@pytest.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
async def charlie(make_user) -> User:
    return await make_user("charlie")
