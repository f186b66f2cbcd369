from __future__ import annotations

import logging
import re
from collections.abc import Callable
from http import HTTPStatus

from bonosvip_gateway.config.settings import require_login_credentials
from bonosvip_gateway.domain.enums import AuthMode
from bonosvip_gateway.services.portal_client import (
    USER_AGENT,
    PortalCredentials,
    PortalEndpoints,
    PortalTransport,
)
from bonosvip_gateway.utils.errors import AuthError, ConfigError

logger = logging.getLogger(__name__)

# Anything shorter is a placeholder, not a real portal session.
MIN_COOKIE_LENGTH = 100

LOGIN_REDIRECT_STATUSES = frozenset(
    {HTTPStatus.MOVED_PERMANENTLY, HTTPStatus.FOUND, HTTPStatus.SEE_OTHER}
)

_COOKIE_SEPARATOR = re.compile(r";\s*")


def normalize_cookies(raw: str | None) -> str:
    """
    Cleans a cookie string pasted into an env var.

    Behavior:
    - Trims, removes CR/LF, and rewrites every `;` plus trailing whitespace as `"; "`.
    """
    if not raw:
        return ""
    cleaned = raw.strip().replace("\n", "").replace("\r", "")
    return _COOKIE_SEPARATOR.sub("; ", cleaned)


def login_acknowledged(status: int) -> bool:
    return 200 <= status < 300 or status in LOGIN_REDIRECT_STATUSES


class StaticTokenSource:
    """
    What it does:
    - Serves a session cookie obtained out-of-band (copied from a logged-in browser).

    Behavior:
    - Reads the cookie string through `read_cookies` on every acquisition, so an operator
      can refresh it without restarting.
    - Fails with ConfigError when the string is missing or shorter than MIN_COOKIE_LENGTH.
    """

    mode = AuthMode.COOKIES

    def __init__(
        self,
        read_cookies: Callable[[], str | None],
        *,
        min_length: int = MIN_COOKIE_LENGTH,
    ) -> None:
        self._read_cookies = read_cookies
        self.min_length = min_length

    def current(self) -> str:
        return normalize_cookies(self._read_cookies())

    def is_configured(self) -> bool:
        return len(self.current()) >= self.min_length

    async def acquire(self) -> str:
        cookies = self.current()
        if not cookies:
            raise ConfigError("Servidor no configurado correctamente. Falta BONOSVIP_COOKIES.")
        if len(cookies) < self.min_length:
            raise ConfigError(
                f"BONOSVIP_COOKIES looks like a placeholder ({len(cookies)} chars, "
                f"expected at least {self.min_length})."
            )
        logger.info("Using configured portal cookies (%d chars)", len(cookies))
        return cookies


class ActiveLoginSource:
    """
    What it does:
    - Logs into the portal through its login form and returns the session cookies it hands out.

    Why it matters:
    - The portal has no token endpoint. The only way in is the same form a human uses.

    Behavior:
    - Missing username/password -> ConfigError, before any network call.
    - Success is judged by status code only (2xx or 301/302/303); the body is not inspected.
    - A success status without any cookie -> AuthError.
    """

    mode = AuthMode.LOGIN

    def __init__(
        self,
        *,
        transport: PortalTransport,
        endpoints: PortalEndpoints,
        username: str | None,
        password: str | None,
    ) -> None:
        self.transport = transport
        self.endpoints = endpoints
        self._username = username
        self._password = password

    def is_configured(self) -> bool:
        try:
            self._credentials()
        except ConfigError:
            return False
        return True

    def _credentials(self) -> PortalCredentials:
        username, password = require_login_credentials(self._username, self._password)
        return PortalCredentials(username=username, password=password)

    async def acquire(self) -> str:
        creds = self._credentials()

        logger.info("Logging into portal as %s", creds.username)
        response = await self.transport.post_form(
            self.endpoints.login_path,
            self.endpoints.login_form(creds),
            headers={"Referer": self.endpoints.root, "User-Agent": USER_AGENT},
            follow_redirects=False,
        )

        if not login_acknowledged(response.status):
            logger.error("Portal login failed with HTTP %s", response.status)
            raise AuthError(f"Portal login failed (HTTP {response.status})")

        if not response.cookies:
            logger.error("Portal answered HTTP %s to login but set no session cookie", response.status)
            raise AuthError("Portal login returned no session cookie")

        logger.info("Portal login succeeded (HTTP %s)", response.status)
        return response.cookies
