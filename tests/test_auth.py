import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from supermarket.auth import AuthUser, Backend, BackendError
from supermarket.entities import Base, User


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'auth.sqlite'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def _add_user(engine, name):
    with Session(engine, expire_on_commit=False) as session:
        user = User(name=name)
        session.add(user)
        session.commit()
        return user.id


def test_get_user_returns_stored_user(engine):
    user_id = _add_user(engine, "Alice")
    found = Backend(engine).get_user(user_id)
    assert found.id() == user_id
    assert found.name == "Alice"


def test_get_user_missing_returns_none(engine):
    _add_user(engine, "Alice")
    assert Backend(engine).get_user(uuid.uuid4()) is None


def test_get_user_distinguishes_users(engine):
    first = _add_user(engine, "Alice")
    second = _add_user(engine, "Bob")
    backend = Backend(engine)
    assert backend.get_user(first).name == "Alice"
    assert backend.get_user(second).name == "Bob"


def test_database_error_becomes_backend_error(tmp_path):
    empty = create_engine(f"sqlite:///{tmp_path / 'empty.sqlite'}")
    try:
        with pytest.raises(BackendError):
            Backend(empty).get_user(uuid.uuid4())
    finally:
        empty.dispose()


def test_auth_user_delegates_to_user():
    user_id = uuid.uuid4()
    wrapped = AuthUser(User(id=user_id, name="Carol"))
    assert wrapped.id() == user_id
    assert wrapped.name == "Carol"


def test_auth_user_missing_attribute_is_absent():
    wrapped = AuthUser(User(id=uuid.uuid4(), name="Carol"))
    assert getattr(wrapped, "no_such_attribute", "missing") == "missing"
    assert hasattr(wrapped, "no_such_attribute") is False