"""PartnerStore — partner edge CRUD with user hydration.

Stateless service that receives the partner model and a user directory
at construction and a session at call time.  It holds no mutable
state, so one instance can serve concurrent requests.

Two hydration paths exist and are kept apart on purpose:

- Reads (``list_for_user``, ``get``) use one SELECT that inner-joins the
  user table twice, once per role, each join requiring a live account.
  A soft-deleted sharer or recipient hides the edge entirely.
- Writes (``create``, ``update``) re-read the row they just touched and
  ask the directory for both snapshots with ``include_deleted=True``.
  Filtering there could fail a write that already succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, insert, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from sqlmodel import select

from .directory import SQLUserDirectory
from .exceptions import (
    ConstraintViolationError,
    IntegrityFaultError,
    PartnerNotFoundError,
)
from .models.partners import IDENTITY_COLUMNS, TIMESTAMP_COLUMNS, PartnerBase
from .types import PartnerDirection, PartnerIds, PartnerInfo

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from .models.users import UserBase
    from .protocol import UserDirectory
    from .types import UserSnapshot

logger = logging.getLogger(__name__)


class PartnerStore:
    """Manages directed partner edges between users.

    Constructor receives the concrete partner model so callers can use
    custom SQLModel subclasses with different table names or extra
    columns.  Extra columns travel through ``PartnerInfo.attributes``.
    """

    def __init__(
        self,
        partner_model: type[PartnerBase] | None = None,
        directory: UserDirectory | None = None,
        *,
        allow_self_share: bool = False,
    ) -> None:
        from .models.partners import Partner

        self._partner_model: type[PartnerBase] = partner_model or Partner  # type: ignore[assignment]
        self._directory: UserDirectory = directory or SQLUserDirectory()
        self._allow_self_share = allow_self_share

    @property
    def partner_model(self) -> type[PartnerBase]:
        return self._partner_model

    @property
    def directory(self) -> UserDirectory:
        return self._directory

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def select_statement(self) -> Any:
        """Partner rows joined to their live sharer and recipient accounts."""
        model = self._partner_model
        user_model = self._directory.user_model
        shared_by = aliased(user_model, name="shared_by")
        shared_with = aliased(user_model, name="shared_with")
        return (
            select(model, shared_by, shared_with)
            .join(
                shared_by,
                and_(
                    model.shared_by_id == shared_by.id,
                    self._directory.live_condition(shared_by),
                ),
            )
            .join(
                shared_with,
                and_(
                    model.shared_with_id == shared_with.id,
                    self._directory.live_condition(shared_with),
                ),
            )
        )

    def list_statement(
        self,
        user_id: str,
        direction: PartnerDirection | str | None = None,
    ) -> Any:
        model = self._partner_model
        stmt = self.select_statement()
        if direction is None:
            return stmt.where(
                or_(model.shared_with_id == user_id, model.shared_by_id == user_id)
            )
        if PartnerDirection(direction) is PartnerDirection.SHARED_BY:
            return stmt.where(model.shared_by_id == user_id)
        return stmt.where(model.shared_with_id == user_id)

    def get_statement(self, ids: PartnerIds) -> Any:
        return self.select_statement().where(*self._identity_clause(ids))

    def insert_statement(self, values: Mapping[str, Any]) -> Any:
        return insert(self._partner_model).values(**values)

    def update_statement(self, ids: PartnerIds, patch: Mapping[str, Any]) -> Any:
        """UPDATE for *patch* on the pair; always bumps ``updated_at``."""
        return (
            update(self._partner_model)
            .where(*self._identity_clause(ids))
            .values(**patch, updated_at=datetime.now(UTC))
        )

    def delete_statement(self, ids: PartnerIds) -> Any:
        return delete(self._partner_model).where(*self._identity_clause(ids))

    def _identity_clause(self, ids: PartnerIds) -> list[Any]:
        model = self._partner_model
        return [
            model.shared_with_id == ids.shared_with_id,
            model.shared_by_id == ids.shared_by_id,
        ]

    # ------------------------------------------------------------------
    # Reads (filtered join)
    # ------------------------------------------------------------------

    async def list_for_user(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        direction: PartnerDirection | str | None = None,
    ) -> list[PartnerInfo]:
        """List edges where *user_id* is sharer or recipient.

        *direction* narrows the result to one side.  Edges whose sharer
        or recipient is soft-deleted are excluded.
        """
        stmt = self.list_statement(user_id, direction)
        result = await session.execute(stmt.execution_options(populate_existing=True))
        return [
            self._joined_to_info(edge, shared_by, shared_with)
            for edge, shared_by, shared_with in result.all()
        ]

    async def get(
        self,
        session: AsyncSession,
        ids: PartnerIds,
        *,
        include_deleted: bool = False,
    ) -> PartnerInfo | None:
        """Get the edge for the exact ordered pair, or None.

        With *include_deleted* the raw row is returned even when an
        endpoint account is soft-deleted, hydrated like a write result.
        """
        if include_deleted:
            edge = await self._get_row(session, ids)
            if edge is None:
                return None
            return await self._hydrate_row(session, edge)

        result = await session.execute(
            self.get_statement(ids).execution_options(populate_existing=True)
        )
        row = result.first()
        if row is None:
            return None
        edge, shared_by, shared_with = row
        return self._joined_to_info(edge, shared_by, shared_with)

    # ------------------------------------------------------------------
    # Writes (unconditional hydration)
    # ------------------------------------------------------------------

    async def create(
        self,
        session: AsyncSession,
        values: Mapping[str, Any] | PartnerBase,
    ) -> PartnerInfo:
        """Insert a new edge and return it hydrated.

        Raises ``ConstraintViolationError`` on a duplicate pair, an
        unknown user id, or a self-share when those are not allowed.
        The timestamps are set here; passing them in a mapping raises
        ``ValueError``.
        """
        model = self._partner_model
        if isinstance(values, PartnerBase):
            data = values.model_dump(exclude=set(TIMESTAMP_COLUMNS))
        else:
            data = dict(values)

        protected = sorted(set(data) & set(TIMESTAMP_COLUMNS))
        if protected:
            raise ValueError(f"Partner fields are set by storage: {', '.join(protected)}")

        missing = [c for c in IDENTITY_COLUMNS if not data.get(c)]
        if missing:
            raise ValueError(f"Missing partner identity: {', '.join(missing)}")
        unknown = sorted(set(data) - set(model.model_fields))
        if unknown:
            raise ValueError(f"Unknown partner fields: {', '.join(unknown)}")

        ids = PartnerIds(
            shared_by_id=data["shared_by_id"],
            shared_with_id=data["shared_with_id"],
        )
        if not self._allow_self_share and ids.shared_by_id == ids.shared_with_id:
            raise ConstraintViolationError(
                f"User {ids.shared_by_id!r} cannot partner with themselves"
            )

        # Instantiate first so column defaults and timestamps are filled in
        row = model(**data).model_dump()
        try:
            await session.execute(self.insert_statement(row))
        except IntegrityError as e:
            raise ConstraintViolationError(
                f"Cannot create partner {ids.shared_by_id!r} -> {ids.shared_with_id!r}: {e.orig}"
            ) from e

        logger.debug("Created partner %s -> %s", ids.shared_by_id, ids.shared_with_id)
        return await self._hydrate_written(session, ids)

    async def update(
        self,
        session: AsyncSession,
        ids: PartnerIds,
        patch: Mapping[str, Any],
    ) -> PartnerInfo:
        """Apply *patch* to the edge for *ids* and return it hydrated.

        Only the patched columns change.  The identity pair and the
        timestamps cannot be patched.
        """
        patch = dict(patch)
        model = self._partner_model

        protected = sorted(set(patch) & {*IDENTITY_COLUMNS, *TIMESTAMP_COLUMNS})
        if protected:
            raise ValueError(f"Partner fields are immutable: {', '.join(protected)}")
        unknown = sorted(set(patch) - set(model.model_fields))
        if unknown:
            raise ValueError(f"Unknown partner fields: {', '.join(unknown)}")

        result = await session.execute(self.update_statement(ids, patch))
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise PartnerNotFoundError(
                f"Partner not found: {ids.shared_by_id!r} -> {ids.shared_with_id!r}"
            )

        logger.debug(
            "Updated partner %s -> %s: %s",
            ids.shared_by_id,
            ids.shared_with_id,
            sorted(patch),
        )
        return await self._hydrate_written(session, ids)

    async def remove(self, session: AsyncSession, ids: PartnerIds) -> None:
        """Delete the edge for *ids*.  Missing edges are not an error."""
        await session.execute(self.delete_statement(ids))
        logger.debug("Removed partner %s -> %s", ids.shared_by_id, ids.shared_with_id)

    # ------------------------------------------------------------------
    # Hydration helpers
    # ------------------------------------------------------------------

    async def _get_row(self, session: AsyncSession, ids: PartnerIds) -> PartnerBase | None:
        model = self._partner_model
        result = await session.execute(
            select(model)
            .where(*self._identity_clause(ids))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _hydrate_written(self, session: AsyncSession, ids: PartnerIds) -> PartnerInfo:
        edge = await self._get_row(session, ids)
        if edge is None:
            logger.error(
                "Partner %s -> %s missing right after write",
                ids.shared_by_id,
                ids.shared_with_id,
            )
            raise IntegrityFaultError(
                f"Partner {ids.shared_by_id!r} -> {ids.shared_with_id!r} vanished after write"
            )
        return await self._hydrate_row(session, edge)

    async def _hydrate_row(self, session: AsyncSession, edge: PartnerBase) -> PartnerInfo:
        shared_by = await self._directory.fetch_user_snapshot(
            session, edge.shared_by_id, include_deleted=True
        )
        shared_with = await self._directory.fetch_user_snapshot(
            session, edge.shared_with_id, include_deleted=True
        )
        if shared_by is None or shared_with is None:
            missing = edge.shared_by_id if shared_by is None else edge.shared_with_id
            logger.error(
                "Partner %s -> %s references missing user %s",
                edge.shared_by_id,
                edge.shared_with_id,
                missing,
            )
            raise IntegrityFaultError(
                f"Partner {edge.shared_by_id!r} -> {edge.shared_with_id!r} "
                f"references missing user {missing!r}"
            )
        return self._to_info(edge, shared_by, shared_with)

    def _joined_to_info(
        self,
        edge: PartnerBase,
        shared_by: UserBase,
        shared_with: UserBase,
    ) -> PartnerInfo:
        return self._to_info(
            edge,
            self._directory.to_snapshot(shared_by),
            self._directory.to_snapshot(shared_with),
        )

    @staticmethod
    def _to_info(
        edge: PartnerBase,
        shared_by: UserSnapshot,
        shared_with: UserSnapshot,
    ) -> PartnerInfo:
        """Convert a partner record plus snapshots to PartnerInfo."""
        data = edge.model_dump()
        attributes = {
            k: v for k, v in data.items() if k not in (*IDENTITY_COLUMNS, *TIMESTAMP_COLUMNS)
        }
        return PartnerInfo(
            shared_by_id=edge.shared_by_id,
            shared_with_id=edge.shared_with_id,
            shared_by=shared_by,
            shared_with=shared_with,
            attributes=attributes,
            created_at=edge.created_at,
            updated_at=edge.updated_at,
        )
