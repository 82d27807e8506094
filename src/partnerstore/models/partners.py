"""Partner model — one directed sharing grant between two users.

The composite primary key ``(shared_by_id, shared_with_id)`` allows at
most one edge per direction per user pair.  The reverse pair is a
separate row.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

IDENTITY_COLUMNS: tuple[str, str] = ("shared_by_id", "shared_with_id")
"""Columns forming the edge identity; never changed by an update."""

TIMESTAMP_COLUMNS: tuple[str, str] = ("created_at", "updated_at")


class PartnerBase(SQLModel):
    """Base fields for a partner edge. Subclass with ``table=True`` for a concrete table.

    Subclasses may add columns; anything outside the identity pair and
    the timestamps is carried through as an opaque attribute.
    """

    shared_by_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    shared_with_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    in_timeline: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class Partner(PartnerBase, table=True):
    """Default partner table — ``partners``."""

    __tablename__ = "partners"
