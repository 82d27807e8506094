"""SQLUserDirectory — user snapshot lookup backed by a SQLModel table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlmodel import select

from .types import UserSnapshot

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from .models.users import UserBase


class SQLUserDirectory:
    """Stateless read access to a user table.

    Receives the concrete user model at construction so callers can
    point it at a custom SQLModel subclass.  Implements ``UserDirectory``.
    """

    def __init__(self, user_model: type[UserBase] | None = None) -> None:
        from .models.users import User

        self._user_model: type[UserBase] = user_model or User  # type: ignore[assignment]

    @property
    def user_model(self) -> type[UserBase]:
        return self._user_model

    def live_condition(self, entity: Any) -> Any:
        return entity.deleted_at.is_(None)

    @staticmethod
    def to_snapshot(user: UserBase) -> UserSnapshot:
        """Project a user row onto its public columns."""
        return UserSnapshot(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar_color=user.avatar_color,
            profile_image_path=user.profile_image_path,
            profile_changed_at=user.profile_changed_at,
        )

    async def fetch_user_snapshot(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        include_deleted: bool = False,
    ) -> UserSnapshot | None:
        """Get a snapshot of *user_id*, or None when no such account is visible."""
        model = self._user_model
        query = select(model).where(model.id == user_id)
        if not include_deleted:
            query = query.where(self.live_condition(model))

        result = await session.execute(query.execution_options(populate_existing=True))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return self.to_snapshot(user)
