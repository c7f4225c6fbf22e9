from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from supermarket.entities import Base, Provider, ProviderType
from supermarket.server import AppState, create_app, get_database_connection


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'server.sqlite'}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add(
            Provider(
                name="Google",
                type=ProviderType.GOOGLE,
                client_id="placeholder",
                client_secret="secret",
            )
        )
        session.commit()
    yield engine
    engine.dispose()


@pytest.fixture
def site_root(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (root / "robots.txt").write_bytes(b"User-agent: *\n")
    return root


@pytest.fixture
def client(engine, site_root):
    app = create_app(AppState(engine, str(site_root)))
    return app.test_client()


def test_database_url_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        get_database_connection()


def test_database_url_used(monkeypatch, tmp_path):
    url = f"sqlite:///{tmp_path / 'x.sqlite'}"
    monkeypatch.setenv("DATABASE_URL", url)
    engine = get_database_connection()
    try:
        assert str(engine.url) == url
    finally:
        engine.dispose()


def test_home_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Welcome to Leptos!" in response.get_data(as_text=True)


def test_sign_in_lists_providers(client):
    response = client.get("/auth/sign-in")
    assert response.status_code == 200
    assert "Sign in with Google" in response.get_data(as_text=True)


def test_sign_out_page(client):
    response = client.get("/auth/sign-out")
    assert response.status_code == 200
    assert "Sign out" in response.get_data(as_text=True)


def test_unknown_page_is_not_found(client):
    response = client.get("/no/such/page")
    assert response.status_code == 404
    assert "Not Found" in response.get_data(as_text=True)


def test_static_file_served(client, site_root):
    response = client.get("/robots.txt")
    assert response.status_code == 200
    assert response.data == (site_root / "robots.txt").read_bytes()


@pytest.mark.parametrize("method", ["get", "post"])
def test_providers_server_function(client, method):
    response = getattr(client, method)("/api/providers")
    assert response.status_code == 200
    data = response.get_json()
    assert [item["name"] for item in data] == ["Google"]
    assert data[0]["type"] == ProviderType.GOOGLE.value
    assert "client_secret" not in data[0]
    assert "client_id" not in data[0]


def test_unknown_server_function(client):
    response = client.post("/api/missing")
    assert response.status_code == 400


def test_server_function_database_error(tmp_path):
    empty = create_engine(f"sqlite:///{tmp_path / 'empty.sqlite'}")
    try:
        response = create_app(AppState(empty)).test_client().get("/api/providers")
        assert response.status_code == 500
    finally:
        empty.dispose()


def test_session_cookie_settings(engine):
    app = create_app(AppState(engine))
    assert app.config["SESSION_COOKIE_HTTPONLY"] is True
    assert app.config["SESSION_COOKIE_SECURE"] is True
    assert app.config["SESSION_COOKIE_SAMESITE"] == "Lax"
    assert app.config["PERMANENT_SESSION_LIFETIME"] == timedelta(days=1)