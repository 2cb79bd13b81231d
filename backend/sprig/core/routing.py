"""Request redirects and aborts."""

from starlette.requests import Request

from sprig.config import Settings
from sprig.core.alerts import Alerts
from sprig.core.errors import Redirect


def go_to(path: str) -> None:
    """End the current request with a redirect to ``path``."""
    raise Redirect(path)


def abort(request: Request, settings: Settings, alerts: Alerts, message: str) -> None:
    """Show ``message`` as an error and send the user to the login page.

    Requests already on the login or logout page continue normally.
    """
    alerts.set("error", message)
    login = settings.require("uri_login")
    logout = settings.require("uri_logout")
    if request.url.path not in (login, logout):
        go_to(login)
