"""One-shot flash messages carried to the next page in a cookie."""

import json
import logging
from urllib.parse import quote, unquote
from typing import Mapping

from starlette.responses import Response

logger = logging.getLogger("sprig")


class Alerts:
    def __init__(self, cookie_name: str, cookies: Mapping[str, str] | None = None, *, path: str = "/") -> None:
        self.cookie_name = cookie_name
        self.path = path
        self._incoming = _decode((cookies or {}).get(cookie_name))
        self._pending: list[dict[str, str]] = []
        self._consumed = False

    def set(self, kind: str, message: str) -> None:
        self._pending.append({"type": kind, "message": message})

    def get(self) -> list[dict[str, str]]:
        """Messages left by the previous response. Reading consumes them."""
        self._consumed = True
        return list(self._incoming)

    @property
    def pending(self) -> list[dict[str, str]]:
        return list(self._pending)

    def write_cookie(self, response: Response) -> None:
        if self._pending:
            response.set_cookie(
                self.cookie_name,
                quote(json.dumps(self._pending, separators=(",", ":"))),
                path=self.path,
                secure=True,
                httponly=True,
                samesite="lax",
            )
        elif self._consumed and self._incoming:
            response.delete_cookie(self.cookie_name, path=self.path, secure=True, httponly=True, samesite="lax")


def _decode(raw: str | None) -> list[dict[str, str]]:
    if not raw:
        return []
    try:
        data = json.loads(unquote(raw))
    except ValueError:
        logger.warning("Discarding malformed alerts cookie")
        return []
    if not isinstance(data, list):
        return []
    return [a for a in data if isinstance(a, dict) and "message" in a]
