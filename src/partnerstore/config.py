"""PartnerStoreConfig — connection and behaviour settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from partnerstore.models.partners import PartnerBase
    from partnerstore.models.users import UserBase


@dataclass
class PartnerStoreConfig:
    """Configuration for a ``PartnerDatabase``."""

    url: str = "sqlite+aiosqlite://"
    """SQLAlchemy async database URL."""

    echo: bool = False
    """Log every emitted statement through the ``sqlalchemy.engine`` logger."""

    allow_self_share: bool = False
    """If True, a user may create an edge pointing at themselves."""

    create_tables: bool = True
    """If True, ``open()`` creates the user and partner tables when missing."""

    partner_model: type[PartnerBase] | None = None
    """Concrete partner table.  Defaults to ``Partner`` (``partners``)."""

    user_model: type[UserBase] | None = None
    """Concrete user table.  Defaults to ``User`` (``users``)."""
