"""Application errors and the page that reports them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from http import HTTPStatus

from markupsafe import Markup

logger = logging.getLogger(__name__)


class AppError(Exception):
    """An error that the application reports to the visitor."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def status_code(self) -> HTTPStatus:
        return self.status


class NotFoundError(AppError):
    """The requested page does not exist."""

    status = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)


def render_error_template(errors: Iterable[BaseException]) -> tuple[Markup, HTTPStatus]:
    """Render the application errors among ``errors``.

    Returns the page body and the status of the first application error.
    """
    app_errors = [error for error in errors if isinstance(error, AppError)]
    logger.debug("Errors: %r", app_errors)
    if not app_errors:
        raise ValueError("No errors found and errors were expected")

    heading = "Errors" if len(app_errors) > 1 else "Error"
    items = [
        Markup("<h2>{} {}</h2><p>Error: {}</p>").format(
            error.status_code().value, error.status_code().phrase, str(error)
        )
        for error in app_errors
    ]
    body = Markup("<h1>{}</h1>").format(heading) + Markup("").join(items)
    return body, app_errors[0].status_code()