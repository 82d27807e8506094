"""PartnerDatabase — async facade owning an engine and per-operation sessions."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import PartnerStoreConfig
from .dialect import enable_sqlite_foreign_keys, get_dialect
from .directory import SQLUserDirectory
from .exceptions import StorageError
from .store import PartnerStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from sqlalchemy.ext.asyncio import AsyncEngine

    from .models.partners import PartnerBase
    from .types import PartnerDirection, PartnerIds, PartnerInfo

logger = logging.getLogger(__name__)


class PartnerDatabase:
    """Async entry point for partner sharing.

    Each operation runs in its own session: committed on success, rolled
    back on error, closed either way.  Errors from the store propagate
    unchanged and are never retried.

    Usage::

        async with PartnerDatabase(PartnerStoreConfig(url="sqlite+aiosqlite://")) as db:
            await db.create_partner({"shared_by_id": a, "shared_with_id": b})
            partners = await db.list_partners(a)

    An existing engine may be passed instead of a URL; the caller then
    keeps ownership and ``close()`` does not dispose it.
    """

    def __init__(
        self,
        config: PartnerStoreConfig | None = None,
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self.config = config or PartnerStoreConfig()
        self._engine = engine
        self._owns_engine = engine is None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

        from .models.partners import Partner
        from .models.users import User

        self._partner_model = self.config.partner_model or Partner
        self._user_model = self.config.user_model or User
        self.directory = SQLUserDirectory(self._user_model)
        self.store = PartnerStore(
            self._partner_model,
            self.directory,
            allow_self_share=self.config.allow_self_share,
        )

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @property
    def dialect(self) -> str:
        if self._engine is None:
            raise StorageError("PartnerDatabase is not open")
        return get_dialect(self._engine)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Create the engine (if needed), the session factory and the tables."""
        if self._engine is None:
            self._engine = create_async_engine(self.config.url, echo=self.config.echo)
        enable_sqlite_foreign_keys(self._engine)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )

        if self.config.create_tables:
            um = self._user_model
            pm = self._partner_model
            async with self._engine.begin() as conn:
                await conn.run_sync(
                    lambda c: um.__table__.create(c, checkfirst=True)  # type: ignore[attr-defined]
                )
                await conn.run_sync(
                    lambda c: pm.__table__.create(c, checkfirst=True)  # type: ignore[attr-defined]
                )

    async def close(self) -> None:
        """Dispose the engine when this instance created it."""
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None

    async def __aenter__(self) -> PartnerDatabase:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error."""
        if self._session_factory is None:
            raise StorageError("PartnerDatabase is not open")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            try:
                await session.rollback()
            except Exception:
                logger.warning("Rollback failed for partner session", exc_info=True)
            raise
        finally:
            try:
                await session.close()
            except Exception:
                logger.warning("Session close failed", exc_info=True)

    # ------------------------------------------------------------------
    # Partner operations
    # ------------------------------------------------------------------

    async def list_partners(
        self,
        user_id: str,
        *,
        direction: PartnerDirection | str | None = None,
    ) -> list[PartnerInfo]:
        async with self.session() as sess:
            return await self.store.list_for_user(sess, user_id, direction=direction)

    async def get_partner(
        self,
        ids: PartnerIds,
        *,
        include_deleted: bool = False,
    ) -> PartnerInfo | None:
        async with self.session() as sess:
            return await self.store.get(sess, ids, include_deleted=include_deleted)

    async def create_partner(self, values: Mapping[str, Any] | PartnerBase) -> PartnerInfo:
        async with self.session() as sess:
            return await self.store.create(sess, values)

    async def update_partner(self, ids: PartnerIds, patch: Mapping[str, Any]) -> PartnerInfo:
        async with self.session() as sess:
            return await self.store.update(sess, ids, patch)

    async def remove_partner(self, ids: PartnerIds) -> None:
        async with self.session() as sess:
            await self.store.remove(sess, ids)
