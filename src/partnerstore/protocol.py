"""UserDirectory protocol — the read-only view of user accounts.

The partner store never owns the user table.  It asks a directory for
the entity to join against, the condition that marks an account live,
and the snapshot projection of a loaded row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from .models.users import UserBase
    from .types import UserSnapshot


@runtime_checkable
class UserDirectory(Protocol):
    """Read interface over user accounts."""

    @property
    def user_model(self) -> type[UserBase]:
        """Concrete SQLModel table holding the accounts."""
        ...

    def live_condition(self, entity: Any) -> Any:
        """SQL condition that is true when *entity* (a model or alias) is not soft-deleted."""
        ...

    def to_snapshot(self, user: UserBase) -> UserSnapshot: ...

    async def fetch_user_snapshot(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        include_deleted: bool = False,
    ) -> UserSnapshot | None: ...
