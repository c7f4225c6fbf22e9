"""The web server: pages, server functions, static files and sessions."""

from __future__ import annotations

import argparse
import logging
import os
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, Response, g, request, send_file, session
from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from supermarket.auth import Backend
from supermarket.views import ProviderSummary, list_providers, render_app

logger = logging.getLogger(__name__)

DEFAULT_SITE_ROOT = "target/site"
DEFAULT_SITE_ADDR = "127.0.0.1:3000"
AUTH_SESSION_KEY = "_auth_user_id"
APP_ROUTES = frozenset({"/", "/auth/sign-in", "/auth/sign-out"})


@dataclass(frozen=True)
class AppState:
    """What every request handler shares."""

    database: Engine
    site_root: str = DEFAULT_SITE_ROOT
    site_addr: str = DEFAULT_SITE_ADDR


def get_database_connection() -> Engine:
    """An engine for the database named by DATABASE_URL."""
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set")
    return create_engine(database_url)


def _provider_json(provider: ProviderSummary) -> dict:
    return {
        "id": str(provider.id),
        "created_at": provider.created_at.isoformat(),
        "updated_at": provider.updated_at.isoformat(),
        "name": provider.name,
        "slug": provider.slug,
        "type": provider.type.value,
    }


def _static_file(root: str, path: str) -> Path | None:
    base = Path(root).resolve()
    candidate = (base / path.lstrip("/")).resolve()
    if candidate != base and base not in candidate.parents:
        return None
    if candidate.is_dir():
        candidate = candidate / "index.html"
    return candidate if candidate.is_file() else None


def create_app(state: AppState) -> Flask:
    """Build the application serving ``state``."""
    app = Flask(__name__, static_folder=None)
    app.config.update(
        SECRET_KEY=secrets.token_hex(32),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(days=1),
        SESSION_REFRESH_EACH_REQUEST=True,
    )
    backend = Backend(state.database)
    app.extensions["supermarket"] = state

    @app.before_request
    def _load_user() -> None:
        g.user = None
        raw_id = session.get(AUTH_SESSION_KEY)
        if not raw_id:
            return
        session.permanent = True
        try:
            user_id = uuid.UUID(str(raw_id))
        except ValueError:
            session.pop(AUTH_SESSION_KEY, None)
            return
        g.user = backend.get_user(user_id)

    @app.route("/api/<path:fn_name>", methods=["GET", "POST"])
    def server_function(fn_name: str):
        if fn_name.strip("/") != "providers":
            return Response(
                f"Could not find a server function at the route {request.path}",
                status=400,
                mimetype="text/plain",
            )
        try:
            with Session(state.database) as db:
                providers = list_providers(db)
        except (SQLAlchemyError, RuntimeError) as error:
            return Response(str(error), status=500, mimetype="text/plain")
        return [_provider_json(provider) for provider in providers]

    def _render(path: str):
        with Session(state.database) as db:
            body, status = render_app(path, db)
        return Response(str(body), status=int(status), mimetype="text/html")

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def page_or_file(path: str):
        route = "/" + path.rstrip("/")
        if route in APP_ROUTES:
            return _render(route)
        static = _static_file(state.site_root, path)
        if static is not None:
            return send_file(static)
        return _render(route)

    return app


def main(argv: list[str] | None = None) -> int:
    """Start the web server."""
    load_dotenv()
    parser = argparse.ArgumentParser(prog="supermarket-server", description="Run the web server.")
    parser.add_argument(
        "--site-root",
        default=os.environ.get("LEPTOS_SITE_ROOT", DEFAULT_SITE_ROOT),
        help="directory of static files",
    )
    parser.add_argument(
        "--site-addr",
        default=os.environ.get("LEPTOS_SITE_ADDR", DEFAULT_SITE_ADDR),
        help="address to listen on, as host:port",
    )
    args = parser.parse_args(argv)

    host, _, port = args.site_addr.rpartition(":")
    if not host or not port.isdigit():
        parser.error(f"invalid site address: {args.site_addr}")

    state = AppState(get_database_connection(), args.site_root, args.site_addr)
    app = create_app(state)
    logging.basicConfig(level=logging.INFO)
    logger.info("Listening on http://%s", args.site_addr)
    try:
        app.run(host=host, port=int(port))
    finally:
        state.database.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())