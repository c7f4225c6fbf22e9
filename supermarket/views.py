"""Pages and components of the web application, rendered on the server."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus
from urllib.parse import urlsplit

from markupsafe import Markup, escape
from sqlalchemy import select
from sqlalchemy.orm import Session

from supermarket.button import ButtonVariant, render_button
from supermarket.entities import Provider, ProviderType
from supermarket.errors import NotFoundError, render_error_template

STYLESHEET = "/pkg/supermarket-web.css"
TITLE = "Supermarket"


@dataclass(frozen=True)
class ProviderSummary:
    """The columns of a sign-in provider that may be shown to visitors."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    name: str
    slug: str | None
    type: ProviderType


def list_providers(session: Session | None) -> list[ProviderSummary]:
    """All sign-in providers, without their client credentials."""
    if session is None:
        raise RuntimeError("Context is missing database connection.")
    statement = select(
        Provider.id,
        Provider.created_at,
        Provider.updated_at,
        Provider.name,
        Provider.slug,
        Provider.type,
    )
    return [ProviderSummary(**row._mapping) for row in session.execute(statement)]


def topbar() -> Markup:
    """The navigation bar at the top of every page."""
    return Markup(
        '<div class="flex flex-col"><div class="border-b">'
        '<div class="flex h-16 items-center px-4">'
        '<div class="flex items-center space-x-2">'
        '<a href="/" class="hover:text-primary text-md font-medium transition-colors">'
        "Supermarket</a></div>"
        '<div class="ml-auto flex items-center space-x-4">'
        '<a href="/auth/sign-in" class="text-muted-foreground hover:text-primary '
        'text-sm font-medium transition-colors">Sign in</a></div>'
        "</div></div></div>"
    )


def layout(content: str) -> Markup:
    """Wrap page content with the header and footer."""
    return Markup(
        '<header class="fixed inset-x-0">{}</header>'
        '<main class="container h-screen w-screen pt-16">{}</main>'
        "<footer></footer>"
    ).format(topbar(), escape(content))


def home_page(count: int = 0) -> Markup:
    """The landing page with its click counter."""
    return Markup("<h1>Welcome to Leptos!</h1><button>Click Me: {}</button>").format(count)


def auth_header(content: str) -> Markup:
    """The heading of an authentication page."""
    return Markup(
        '<div class="mt-[-64px] flex flex-col space-y-2 text-center">'
        '<h1 class="text-2xl font-semibold tracking-tight">{}</h1></div>'
    ).format(escape(content))


def auth_layout(content: str) -> Markup:
    """The centred column that holds an authentication page."""
    return Markup(
        '<div class="mx-auto flex h-full w-full flex-col justify-center space-y-6 sm:w-[400px]">'
        "{}</div>"
    ).format(escape(content))


def sign_in_button(provider) -> Markup:
    """A button that signs in with ``provider``."""
    icon = ProviderType(provider.type).name.lower()
    children = Markup(
        '<img class="h-5 w-5" src="/images/icons/providers/{}.svg" alt="Icon">'
        "<span>Sign in with {}</span>"
    ).format(icon, provider.name)
    return render_button(children, ButtonVariant.OUTLINE, class_="gap-3")


def sign_in_page(providers: Iterable | None) -> Markup:
    """The sign-in page; ``None`` means the providers are still loading."""
    if providers is None:
        listing = Markup("<span>Loading...</span>")
    else:
        buttons = Markup("").join(sign_in_button(provider) for provider in providers)
        listing = Markup('<div class="grid gap-6">{}</div>').format(buttons)
    return auth_layout(auth_header("Sign in") + listing)


def sign_out_page() -> Markup:
    """The sign-out page."""
    return auth_layout(auth_header("Sign out"))


def _document(body: Markup) -> Markup:
    return Markup(
        '<!DOCTYPE html><html><head><title>{}</title>'
        '<link id="leptos" rel="stylesheet" href="{}"></head>'
        "<body>{}</body></html>"
    ).format(TITLE, STYLESHEET, body)


def render_app(path: str, session: Session | None = None) -> tuple[Markup, HTTPStatus]:
    """Render the page at ``path`` as a whole document, with its status."""
    route = urlsplit(path).path.rstrip("/")
    if route == "":
        body = home_page()
    elif route == "/auth/sign-in":
        body = sign_in_page(list_providers(session))
    elif route == "/auth/sign-out":
        body = sign_out_page()
    else:
        error_body, status = render_error_template([NotFoundError()])
        return _document(error_body), status
    return _document(layout(body)), HTTPStatus.OK