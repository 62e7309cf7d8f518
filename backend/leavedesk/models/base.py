from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _utc_timestamp(**column_kwargs: Any) -> Any:
    """Timezone-aware timestamp column defaulting to now, in Python and in SQL."""
    return Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now(), **column_kwargs},
    )


class UUIDBase(SQLModel):
    """Random UUID primary key."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    created_at: datetime = _utc_timestamp()


class UpdatedAtMixin(SQLModel):
    """Bumped by the database on every UPDATE, including Core ``update()`` statements."""

    updated_at: datetime = _utc_timestamp(onupdate=sa.func.now())
