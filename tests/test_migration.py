import uuid

import pytest
from sqlalchemy import MetaData, Text, Column, create_engine, inspect, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from supermarket.entities import EmailAddress, Provider, ProviderType, User
from supermarket.migration import Migration, Migrator, base_table, main

AUTH_TABLES = {"user", "email_address", "provider", "provider_connection"}


@pytest.fixture
def connection():
    engine = create_engine("sqlite://")
    with engine.connect() as conn:
        yield conn
    engine.dispose()


def test_base_table_columns():
    table = base_table("thing", MetaData(), Column("label", Text()))
    assert [c.name for c in table.columns] == ["id", "created_at", "updated_at", "label"]
    assert [c.name for c in table.primary_key.columns] == ["id"]
    assert all(table.c[name].server_default is not None for name in ("id", "created_at", "updated_at"))


def test_up_creates_tables_and_records_version(connection):
    applied = Migrator().up(connection)

    assert applied == ["m20240314_090725_create_auth"]
    assert AUTH_TABLES | {"seaql_migrations"} == set(inspect(connection).get_table_names())
    versions = connection.execute(text("SELECT version FROM seaql_migrations")).scalars().all()
    assert versions == [Migration.name]


def test_up_twice_applies_nothing(connection):
    migrator = Migrator()
    migrator.up(connection)
    assert migrator.up(connection) == []


def test_constraints_are_named(connection):
    Migrator().up(connection)
    inspector = inspect(connection)

    uniques = inspector.get_unique_constraints("provider_connection")
    assert {u["name"] for u in uniques} == {"unique_identifier_provider_id"}
    foreign_keys = inspector.get_foreign_keys("provider_connection")
    assert {fk["name"] for fk in foreign_keys} == {
        "fk_provider_connection_provider",
        "fk_provider_connection_user",
    }


def test_server_defaults_fill_id_and_timestamps(connection):
    Migrator().up(connection)
    connection.execute(text('INSERT INTO "user" (name) VALUES (\'Ada\')'))

    row = connection.execute(text('SELECT id, created_at FROM "user"')).one()
    assert uuid.UUID(row.id).hex == row.id
    assert row.created_at is not None


def test_email_is_unique(connection):
    Migrator().up(connection)
    with Session(bind=connection) as session:
        user = User(name="Ada")
        session.add(user)
        session.add(EmailAddress(email="ada@example.com", user=user))
        session.flush()
        session.add(EmailAddress(email="ada@example.com", user=user))
        with pytest.raises(IntegrityError):
            session.flush()


def test_entities_work_on_migrated_schema(connection):
    Migrator().up(connection)
    with Session(bind=connection) as session:
        session.add(Provider(name="Google", type=ProviderType.GOOGLE))
        session.flush()
        session.expunge_all()
        provider = session.scalars(select(Provider)).one()
        assert provider.type is ProviderType.GOOGLE
        assert provider.client_secret is None


def test_down_removes_tables(connection):
    migrator = Migrator()
    migrator.up(connection)

    assert migrator.down(connection) == [Migration.name]
    assert set(inspect(connection).get_table_names()) == {"seaql_migrations"}
    assert migrator.down(connection) == []


def test_unknown_applied_version_is_an_error(connection):
    migrator = Migrator()
    migrator.up(connection)
    connection.execute(
        text("INSERT INTO seaql_migrations (version, applied_at) VALUES ('m_unknown', 0)")
    )

    with pytest.raises(RuntimeError, match="m_unknown"):
        migrator.up(connection)


def test_main_up_status_and_reset(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'shop.sqlite'}"

    assert main(["-u", url, "up"]) == 0
    assert main(["-u", url, "status"]) == 0
    output = capsys.readouterr().out
    assert f"Migration '{Migration.name}'... Applied" in output

    engine = create_engine(url)
    with engine.connect() as conn:
        assert AUTH_TABLES <= set(inspect(conn).get_table_names())
    engine.dispose()

    assert main(["-u", url, "reset"]) == 0
    engine = create_engine(url)
    with engine.connect() as conn:
        assert set(inspect(conn).get_table_names()) == {"seaql_migrations"}
    engine.dispose()


def test_main_reads_database_url_from_environment(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'env.sqlite'}"
    monkeypatch.setenv("DATABASE_URL", url)

    assert main([]) == 0
    assert main(["fresh"]) == 0

    engine = create_engine(url)
    with engine.connect() as conn:
        versions = conn.execute(text("SELECT version FROM seaql_migrations")).scalars().all()
    engine.dispose()
    assert versions == [Migration.name]