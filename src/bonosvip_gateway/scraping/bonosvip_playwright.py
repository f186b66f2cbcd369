"""
bonosvip_playwright.py

What this module does
- Implements `PortalTransport` on top of Playwright's APIRequestContext (HTTP only, no browser).

Why it matters
- Keeps every network detail out of the session and validation logic.
- Each call runs in its own short-lived request context. Cookies never leak from one call
  into the next; the caller decides what goes into the `Cookie` header.

Behavior summary
- The Playwright driver starts lazily on the first call and stops in `close()`.
- `post_form()` returns the status, body text and the cookies the context holds after the call.
- Playwright errors and timeouts are raised as NetworkError. HTTP error statuses are returned.
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Playwright, async_playwright

from bonosvip_gateway.domain.models import PortalResponse
from bonosvip_gateway.services.portal_client import PortalTransport
from bonosvip_gateway.utils.errors import NetworkError

logger = logging.getLogger(__name__)


def cookie_header(cookies: list[dict]) -> str:
    """Renders Playwright storage-state cookies as a `Cookie` header value."""
    return "; ".join(f"{c['name']}={c['value']}" for c in cookies if c.get("name"))


class PlaywrightPortalTransport(PortalTransport):
    """
    Playwright implementation of PortalTransport.

    Behavior:
    - Every request carries `timeout_ms`; a timeout surfaces as NetworkError.
    - `follow_redirects=False` maps to `max_redirects=0` so the login redirect is observed as-is.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_ms: int = 15_000,
        ignore_https_errors: bool = False,
    ) -> None:
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.ignore_https_errors = ignore_https_errors

        self._pw: Playwright | None = None

    # -------------------- Lifecycle --------------------

    async def _start(self) -> Playwright:
        if self._pw is None:
            try:
                self._pw = await async_playwright().start()
            except PlaywrightError as e:
                raise NetworkError(f"Failed to start Playwright: {e}") from e
        return self._pw

    async def close(self) -> None:
        if self._pw is not None:
            try:
                await self._pw.stop()
            finally:
                self._pw = None

    # -------------------- Requests --------------------

    async def post_form(
        self,
        path: str,
        form: dict[str, str],
        *,
        headers: dict[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> PortalResponse:
        pw = await self._start()

        context = None
        try:
            context = await pw.request.new_context(
                base_url=self.base_url,
                extra_http_headers=headers or {},
                ignore_https_errors=self.ignore_https_errors,
                timeout=self.timeout_ms,
            )
            response = await context.post(
                path,
                form=form,
                max_redirects=20 if follow_redirects else 0,
                timeout=self.timeout_ms,
            )
            body = await response.text()
            state = await context.storage_state()
        except PlaywrightError as e:
            logger.error("Portal request to %s failed: %s", path, e)
            raise NetworkError(f"Portal request to {path} failed: {e}") from e
        finally:
            if context is not None:
                await context.dispose()

        return PortalResponse(
            status=response.status,
            body=body,
            cookies=cookie_header(state.get("cookies", [])),
        )
