"""Schema migrations of the shop's database and a command to run them."""

from __future__ import annotations

import argparse
import os
import time
from typing import NamedTuple

from dotenv import load_dotenv
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Connection,
    DateTime,
    Enum,
    ForeignKeyConstraint,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    create_engine,
    false,
    func,
    inspect,
    select,
    text,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

MIGRATIONS_TABLE = "seaql_migrations"


class _GenRandomUuid(FunctionElement):
    type = Uuid()
    name = "gen_random_uuid"
    inherit_cache = True


@compiles(_GenRandomUuid)
def _compile_gen_random_uuid(element, compiler, **kw):
    return "gen_random_uuid()"


@compiles(_GenRandomUuid, "sqlite")
def _compile_gen_random_uuid_sqlite(element, compiler, **kw):
    return "(lower(hex(randomblob(16))))"


def base_table(name: str, metadata: MetaData, *args) -> Table:
    """Build a table carrying the id and timestamp columns shared by every table."""
    return Table(
        name,
        metadata,
        Column("id", Uuid(), primary_key=True, nullable=False, server_default=_GenRandomUuid()),
        Column("created_at", DateTime(), nullable=False, server_default=func.current_timestamp()),
        Column("updated_at", DateTime(), nullable=False, server_default=func.current_timestamp()),
        *args,
    )


def _cascade_fk(columns, target, name):
    return ForeignKeyConstraint(
        columns, [target], name=name, onupdate="CASCADE", ondelete="CASCADE"
    )


class _AuthSchema(NamedTuple):
    user: Table
    email_address: Table
    provider_type: Enum
    provider: Table
    provider_connection: Table


def _auth_schema(metadata: MetaData) -> _AuthSchema:
    user = base_table("user", metadata, Column("name", Text(), nullable=False))
    email_address = base_table(
        "email_address",
        metadata,
        Column("email", String(254), nullable=False, unique=True),
        Column("is_primary", Boolean(), nullable=False, server_default=false()),
        Column("is_verified", Boolean(), nullable=False, server_default=false()),
        Column("verification_token", String(32)),
        Column("verified_at", DateTime()),
        Column("user_id", Uuid(), nullable=False),
        _cascade_fk(["user_id"], "user.id", "fk_email_address_user"),
    )
    provider_type = Enum(
        "apple", "google", "microsoft", name="provider_type", metadata=metadata
    )
    provider = base_table(
        "provider",
        metadata,
        Column("name", String(256), nullable=False),
        Column("slug", String(256)),
        Column("type", provider_type, nullable=False),
        Column("client_id", Text()),
        Column("client_secret", Text()),
    )
    provider_connection = base_table(
        "provider_connection",
        metadata,
        Column("identifier", Text(), nullable=False),
        Column("access_token", Text()),
        Column("refresh_token", Text()),
        Column("expires_at", DateTime()),
        Column("provider_id", Uuid(), nullable=False),
        Column("user_id", Uuid(), nullable=False),
        _cascade_fk(["provider_id"], "provider.id", "fk_provider_connection_provider"),
        _cascade_fk(["user_id"], "user.id", "fk_provider_connection_user"),
        UniqueConstraint("identifier", "provider_id", name="unique_identifier_provider_id"),
    )
    return _AuthSchema(user, email_address, provider_type, provider, provider_connection)


class Migration:
    """Create the users, e-mail addresses and sign-in providers."""

    name = "m20240314_090725_create_auth"

    def up(self, connection: Connection) -> None:
        schema = _auth_schema(MetaData())
        schema.user.create(connection)
        schema.email_address.create(connection)
        schema.provider_type.create(connection)
        schema.provider.create(connection)
        schema.provider_connection.create(connection)

    def down(self, connection: Connection) -> None:
        schema = _auth_schema(MetaData())
        schema.provider_connection.drop(connection)
        schema.provider.drop(connection)
        schema.provider_type.drop(connection)
        schema.email_address.drop(connection)
        schema.user.drop(connection)


def _tracking_table(metadata: MetaData) -> Table:
    return Table(
        MIGRATIONS_TABLE,
        metadata,
        Column("version", String(), primary_key=True),
        Column("applied_at", BigInteger(), nullable=False),
    )


class Migrator:
    """Applies and rolls back migrations, recording them in the database."""

    def migrations(self) -> list[Migration]:
        return [Migration()]

    def up(self, connection: Connection) -> list[str]:
        """Apply every pending migration; return the names applied."""
        return self._apply(connection, None)

    def down(self, connection: Connection) -> list[str]:
        """Roll back the last applied migration; return the names rolled back."""
        return self._rollback(connection, 1)

    def _tracking(self, connection: Connection) -> Table:
        table = _tracking_table(MetaData())
        table.create(connection, checkfirst=True)
        return table

    def _applied(self, connection: Connection, table: Table) -> list[str]:
        versions = list(connection.scalars(select(table.c.version).order_by(table.c.version)))
        known = {migration.name for migration in self.migrations()}
        for version in versions:
            if version not in known:
                raise RuntimeError(
                    f"Migration file of version '{version}' is missing, "
                    "this migration has been applied but its file is missing"
                )
        return versions

    def _status(self, connection: Connection) -> list[tuple[str, bool]]:
        applied = set(self._applied(connection, self._tracking(connection)))
        return [(m.name, m.name in applied) for m in self.migrations()]

    def _apply(self, connection: Connection, steps: int | None) -> list[str]:
        table = self._tracking(connection)
        applied = set(self._applied(connection, table))
        pending = [m for m in self.migrations() if m.name not in applied]
        if steps is not None:
            pending = pending[:steps]
        for migration in pending:
            migration.up(connection)
            connection.execute(
                table.insert().values(version=migration.name, applied_at=int(time.time()))
            )
        return [m.name for m in pending]

    def _rollback(self, connection: Connection, steps: int | None) -> list[str]:
        table = self._tracking(connection)
        applied = self._applied(connection, table)
        by_name = {m.name: m for m in self.migrations()}
        chosen = list(reversed(applied))
        if steps is not None:
            chosen = chosen[:steps]
        for name in chosen:
            by_name[name].down(connection)
            connection.execute(table.delete().where(table.c.version == name))
        return chosen


def _drop_everything(connection: Connection) -> None:
    metadata = MetaData()
    metadata.reflect(bind=connection)
    metadata.drop_all(bind=connection)
    if connection.dialect.name == "postgresql":
        quote = connection.dialect.identifier_preparer.quote
        for enum_type in inspect(connection).get_enums():
            connection.execute(text(f"DROP TYPE IF EXISTS {quote(enum_type['name'])}"))


def _report(verb: str, names: list[str], empty: str) -> None:
    if not names:
        print(empty)
    for name in names:
        print(f"{verb} migration '{name}'")


def main(argv: list[str] | None = None) -> int:
    """Run a migration command against the database named by DATABASE_URL."""
    parser = argparse.ArgumentParser(prog="supermarket-migrate", description="Run database migrations.")
    parser.add_argument("-u", "--database-url", help="database URL (default: $DATABASE_URL)")
    commands = parser.add_subparsers(dest="command")
    up_parser = commands.add_parser("up", help="apply pending migrations")
    up_parser.add_argument("-n", "--num", type=int, default=None, help="number of migrations to apply")
    down_parser = commands.add_parser("down", help="roll back applied migrations")
    down_parser.add_argument("-n", "--num", type=int, default=1, help="number of migrations to roll back")
    commands.add_parser("status", help="show the state of every migration")
    commands.add_parser("fresh", help="drop all tables, then apply every migration")
    commands.add_parser("refresh", help="roll back all migrations, then apply them again")
    commands.add_parser("reset", help="roll back all applied migrations")
    args = parser.parse_args(argv)

    load_dotenv()
    url = args.database_url or os.environ.get("DATABASE_URL")
    if not url:
        parser.error("DATABASE_URL is not set")

    command = args.command or "up"
    migrator = Migrator()
    engine = create_engine(url)
    try:
        with engine.begin() as connection:
            if command == "up":
                _report("Applied", migrator._apply(connection, getattr(args, "num", None)), "No pending migrations")
            elif command == "down":
                _report("Rolled back", migrator._rollback(connection, args.num), "No migrations to roll back")
            elif command == "status":
                for name, applied in migrator._status(connection):
                    print(f"Migration '{name}'... {'Applied' if applied else 'Pending'}")
            elif command == "fresh":
                _drop_everything(connection)
                _report("Applied", migrator._apply(connection, None), "No pending migrations")
            elif command == "refresh":
                _report("Rolled back", migrator._rollback(connection, None), "No migrations to roll back")
                _report("Applied", migrator._apply(connection, None), "No pending migrations")
            elif command == "reset":
                _report("Rolled back", migrator._rollback(connection, None), "No migrations to roll back")
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())