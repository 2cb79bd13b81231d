"""Cookie-backed sessions: guest and authenticated identity for one request.

A ``SessionManager`` is created per request from the incoming cookies. Two
cookies carry the state between requests:

- the session cookie holds the session id;
- the "active" marker (``"1"``) is set alongside authenticated-capable
  sessions and is never written for guests. A marker without a session
  cookie means the session expired in the browser.

Ids are ``sha256(auth_key + value)``: deterministic, and only reproducible by
holders of ``auth_key``.
"""

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from starlette.responses import Response

from sprig.config import Settings

logger = logging.getLogger("sprig.session")

EXPIRED_MESSAGE = "Your Session has Expired"


@dataclass(frozen=True, slots=True)
class CookieWrite:
    """One Set-Cookie to emit. ``expires=None`` means a browser-session cookie."""

    name: str
    value: str
    expires: float | None
    path: str
    httponly: bool
    samesite: str
    secure: bool = True

    def apply(self, response: Response) -> None:
        expires = None
        if self.expires is not None:
            expires = datetime.fromtimestamp(self.expires, tz=timezone.utc)
        response.set_cookie(
            self.name,
            self.value,
            expires=expires,
            path=self.path,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class SessionManager:
    def __init__(
        self,
        settings: Settings,
        cookies: Mapping[str, str] | None = None,
        *,
        on_expired: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._cookies = dict(cookies or {})
        self._on_expired = on_expired
        self._clock = clock
        self._id: str | None = None
        self._user: Any = None
        self._writes: dict[str, CookieWrite] = {}

    def setup(self) -> None:
        """Resolve the session for this request from its cookies."""
        name = self._settings.require("session_cookie_name")
        active = self._settings.require("session_cookie_name_active")

        if not self._cookies.get(name) and self._cookies.get(active):
            logger.info("Session expired; clearing cookies")
            self.clear()
            if self._on_expired is not None:
                self._on_expired(EXPIRED_MESSAGE)

        if self._cookies.get(name):
            self._id = self._cookies[name]
        else:
            self._id = self.make_id_from(f"{self._clock():.6f}")
            self._update_cookie(self._id, self.get_ttl(guest=True), guest=True)

    def set(self, unique: str, user: Any = None, ttl: int | None = None) -> None:
        """Start a session whose id derives from ``unique``. Always rotates the id."""
        self._id = self.make_id_from(unique)
        if user:
            self._user = user
        self.update(user, ttl)

    def update(self, user: Any = None, ttl: int | None = None) -> None:
        """Attach ``user`` (if given) and rewrite the cookies with ``ttl`` or the default TTL."""
        if not self._id:
            self._id = self.make_id_from(json.dumps(user, sort_keys=True, default=str) + str(ttl or ""))
        if user:
            self._user = user
        self._update_cookie(self._id, self.get_ttl() if ttl is None else int(ttl))

    def clear(self) -> None:
        self._id = None
        self._user = None
        self._update_cookie()

    def get_id(self) -> str | None:
        return self._id

    def get_user(self) -> Any:
        return self._user

    def get_csrf(self) -> str | None:
        """CSRF token bound to the session id, or to ``auth_key`` when there is no session."""
        auth_key = self._settings.require("auth_key")
        if self._id:
            return _sha256(self._id)
        return _sha256(auth_key) if auth_key else None

    def get_ttl(self, guest: bool = False) -> int:
        ttl = self._settings.require("session_ttl")
        ttl_guest = self._settings.require("session_ttl_guest")
        return int(ttl_guest if guest else ttl)

    def make_id_from(self, value: str) -> str:
        return _sha256(self._settings.require("auth_key") + value)

    @property
    def cookie_writes(self) -> list[CookieWrite]:
        return list(self._writes.values())

    def write_cookies(self, response: Response) -> None:
        for cookie in self._writes.values():
            cookie.apply(response)

    def _update_cookie(self, session_id: str = "", ttl: int = 0, guest: bool = False) -> None:
        name = self._settings.require("session_cookie_name")
        active = self._settings.require("session_cookie_name_active")
        httponly = bool(self._settings.require("session_cookie_http_only"))
        path = self._settings.require("base_uri")
        samesite = self._settings.session_cookie_samesite

        now = self._clock()
        past = now - 1

        if not guest:
            marker = "1" if session_id else ""
            self._writes[active] = CookieWrite(
                active, marker, None if session_id else past, path, httponly, samesite
            )
            self._cookies[active] = marker

        if session_id:
            expires = now + ttl if ttl else None
        else:
            expires = past
        self._writes[name] = CookieWrite(name, session_id, expires, path, httponly, samesite)
        self._cookies[name] = session_id
