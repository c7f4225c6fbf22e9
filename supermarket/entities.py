"""ORM entities of the shop's database."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProviderType(str, enum.Enum):
    """Kinds of external sign-in provider."""

    APPLE = "apple"
    GOOGLE = "google"
    MICROSOFT = "microsoft"


class Base(DeclarativeBase):
    """Declarative base of all entities."""


class _Record:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow)


_CASCADE = {"ondelete": "CASCADE", "onupdate": "CASCADE"}


class User(_Record, Base):
    __tablename__ = "user"

    name: Mapped[str] = mapped_column(Text)

    email_addresses: Mapped[list[EmailAddress]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    provider_connections: Mapped[list[ProviderConnection]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class EmailAddress(_Record, Base):
    __tablename__ = "email_address"

    email: Mapped[str] = mapped_column(String(254), unique=True)
    is_primary: Mapped[bool] = mapped_column(default=False)
    is_verified: Mapped[bool] = mapped_column(default=False)
    verification_token: Mapped[str | None] = mapped_column(String(32))
    verified_at: Mapped[datetime | None] = mapped_column()
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user.id", name="fk_email_address_user", **_CASCADE)
    )

    user: Mapped[User] = relationship(back_populates="email_addresses")


class Provider(_Record, Base):
    __tablename__ = "provider"

    name: Mapped[str] = mapped_column(String(256))
    slug: Mapped[str | None] = mapped_column(String(256))
    type: Mapped[ProviderType] = mapped_column(
        Enum(
            ProviderType,
            name="provider_type",
            values_callable=lambda members: [member.value for member in members],
        )
    )
    client_id: Mapped[str | None] = mapped_column(Text)
    client_secret: Mapped[str | None] = mapped_column(Text)

    provider_connections: Mapped[list[ProviderConnection]] = relationship(
        back_populates="provider", cascade="all, delete-orphan", passive_deletes=True
    )


class ProviderConnection(_Record, Base):
    __tablename__ = "provider_connection"
    __table_args__ = (
        UniqueConstraint("identifier", "provider_id", name="unique_identifier_provider_id"),
    )

    identifier: Mapped[str] = mapped_column(Text)
    access_token: Mapped[str | None] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[datetime | None] = mapped_column()
    provider_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("provider.id", name="fk_provider_connection_provider", **_CASCADE)
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user.id", name="fk_provider_connection_user", **_CASCADE)
    )

    provider: Mapped[Provider] = relationship(back_populates="provider_connections")
    user: Mapped[User] = relationship(back_populates="provider_connections")