from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Protocol

from bonosvip_gateway.domain.enums import AuthMode
from bonosvip_gateway.domain.models import PortalResponse

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class PortalCredentials:
    username: str
    password: str


@dataclass(frozen=True)
class PortalEndpoints:
    """
    What it does:
    - Keeps every portal path and fixed form field in one place.

    Why it matters:
    - The portal has no versioned API. When it moves a page, only this class changes.
    """

    base_url: str
    login_path: str = "/component/users/?task=user.login"
    validate_path: str = "/php/proc.php"
    validate_page_path: str = "/validar-bonosvip.html"

    @property
    def root(self) -> str:
        return self.base_url.rstrip("/") + "/"

    @property
    def validate_referer(self) -> str:
        return self.base_url.rstrip("/") + self.validate_page_path

    def login_return(self) -> str:
        # Joomla expects the post-login landing page as base64 in the `return` field.
        return base64.b64encode(self.root.encode("utf-8")).decode("ascii")

    def login_form(self, creds: PortalCredentials) -> dict[str, str]:
        return {
            "username": creds.username,
            "password": creds.password,
            "option": "com_users",
            "task": "user.login",
            "return": self.login_return(),
        }

    def validate_form(self, *, h: str, q: str, validator_name: str) -> dict[str, str]:
        return {"q": q, "h": h, "validador": validator_name}


class PortalTransport(Protocol):
    """
    What it does:
    - The opaque call-response primitive used to talk to the portal.

    Behavior:
    - post_form() sends a form-encoded POST and returns status, body and the cookies held afterwards.
    - Transport failures and timeouts raise NetworkError. HTTP error statuses are returned, not raised.
    """

    async def post_form(
        self,
        path: str,
        form: dict[str, str],
        *,
        headers: dict[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> PortalResponse: ...

    async def close(self) -> None: ...


class CredentialSource(Protocol):
    """
    What it does:
    - Supplies a cookie string usable as the `Cookie` header of validation calls.

    Behavior:
    - acquire() returns a non-empty token or raises ConfigError / AuthError.
    - is_configured() answers without any network call.
    """

    mode: AuthMode

    async def acquire(self) -> str: ...

    def is_configured(self) -> bool: ...
