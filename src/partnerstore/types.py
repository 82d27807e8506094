"""Result types: UserSnapshot, PartnerIds, PartnerInfo."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime


class PartnerDirection(str, Enum):
    """Which side of an edge a user is on."""

    SHARED_BY = "shared-by"
    SHARED_WITH = "shared-with"


@dataclass(frozen=True)
class PartnerIds:
    """Identity pair of a partner edge."""

    shared_by_id: str
    shared_with_id: str


@dataclass(frozen=True)
class UserSnapshot:
    """Public columns of a user account, as of query time."""

    id: str
    email: str
    name: str
    avatar_color: str | None = None
    profile_image_path: str = ""
    profile_changed_at: datetime | None = None


@dataclass
class PartnerInfo:
    """A partner edge hydrated with both endpoint users."""

    shared_by_id: str
    shared_with_id: str
    shared_by: UserSnapshot
    shared_with: UserSnapshot
    attributes: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def ids(self) -> PartnerIds:
        return PartnerIds(shared_by_id=self.shared_by_id, shared_with_id=self.shared_with_id)

    @property
    def in_timeline(self) -> bool:
        return bool(self.attributes.get("in_timeline", False))
