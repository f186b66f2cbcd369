from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from bonosvip_gateway.config.settings import Settings, load_settings
from bonosvip_gateway.domain.enums import AuthMode, SessionState
from bonosvip_gateway.domain.models import ValidationOutcome
from bonosvip_gateway.scraping.bonosvip_playwright import PlaywrightPortalTransport
from bonosvip_gateway.services.credentials import ActiveLoginSource, StaticTokenSource
from bonosvip_gateway.services.portal_client import CredentialSource, PortalEndpoints, PortalTransport
from bonosvip_gateway.services.session_manager import SessionManager
from bonosvip_gateway.services.validation_client import ValidationClient
from bonosvip_gateway.utils.errors import FormatError, GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    success: bool
    voucher_code: str
    outcome: ValidationOutcome | None = None
    error: str | None = None
    error_kind: str | None = None

    @classmethod
    def failed(cls, voucher_code: str, exc: GatewayError) -> ValidationResult:
        return cls(success=False, voucher_code=voucher_code, error=str(exc), error_kind=exc.kind)

    def to_dict(self) -> dict[str, Any]:
        if not self.success or self.outcome is None:
            return {"success": False, "error": self.error, "error_kind": self.error_kind}

        outcome = self.outcome
        return {
            "success": True,
            "valid": outcome.valid,
            "voucher": {
                "code": self.voucher_code,
                "service": outcome.service,
                "customer": outcome.customer,
                "raw_response": outcome.raw_body,
            },
            "error": outcome.error_message,
        }


@dataclass(frozen=True)
class HealthStatus:
    ready: bool
    auth_mode: AuthMode
    session_state: SessionState
    uptime_seconds: float

    @property
    def logged_in(self) -> bool:
        return self.session_state is SessionState.AUTHENTICATED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "ready": self.ready,
            "auth_mode": self.auth_mode.value,
            "session_state": self.session_state.value,
            "logged_in": self.logged_in,
            "uptime": round(self.uptime_seconds, 3),
        }


@dataclass(frozen=True)
class LoginResult:
    success: bool
    logged_in: bool
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "logged_in": self.logged_in}
        if self.error is not None:
            data["error"] = self.error
            data["error_kind"] = self.error_kind
        return data


def build_credential_source(cfg: Settings, *, transport: PortalTransport) -> CredentialSource:
    if cfg.effective_auth_mode() == AuthMode.COOKIES:
        # A refreshed BONOSVIP_COOKIES wins; the value passed in is the fallback.
        return StaticTokenSource(lambda: load_settings().portal_cookies or cfg.portal_cookies)

    return ActiveLoginSource(
        transport=transport,
        endpoints=PortalEndpoints(base_url=cfg.portal_url),
        username=cfg.portal_username,
        password=cfg.portal_password,
    )


class VoucherGateway:
    """
    What it does:
    - The single entry point an HTTP layer or the CLI calls: validate, health, login.

    Why it matters:
    - Callers always get a structured result. GatewayError never escapes this class;
      mapping results to HTTP statuses is the boundary layer's job.

    Behavior:
    - validate() checks the code format before touching the session.
    - health() makes no network call.
    - Usable as `async with`; closing the gateway closes the transport.
    """

    def __init__(
        self,
        *,
        transport: PortalTransport,
        sessions: SessionManager,
        client: ValidationClient,
    ) -> None:
        self.transport = transport
        self.sessions = sessions
        self.client = client
        self._started = time.monotonic()

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        *,
        transport: PortalTransport | None = None,
    ) -> VoucherGateway:
        if transport is None:
            transport = PlaywrightPortalTransport(
                base_url=cfg.portal_url,
                timeout_ms=cfg.portal_timeout_ms,
            )

        endpoints = PortalEndpoints(base_url=cfg.portal_url)
        sessions = SessionManager(
            build_credential_source(cfg, transport=transport),
            ttl=timedelta(seconds=cfg.session_ttl_seconds),
        )
        client = ValidationClient(
            transport=transport,
            sessions=sessions,
            endpoints=endpoints,
            validator_name=cfg.validator_name,
        )
        return cls(transport=transport, sessions=sessions, client=client)

    async def __aenter__(self) -> VoucherGateway:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    async def validate(self, voucher_code: str) -> ValidationResult:
        if not voucher_code:
            return ValidationResult.failed("", FormatError("Missing voucher_code parameter"))

        logger.info("Validation requested for %s", voucher_code)
        try:
            outcome = await self.client.submit(voucher_code)
        except GatewayError as e:
            logger.warning("Validation of %s failed (%s): %s", voucher_code, e.kind, e)
            return ValidationResult.failed(voucher_code, e)

        return ValidationResult(success=True, voucher_code=voucher_code, outcome=outcome)

    def health(self) -> HealthStatus:
        return HealthStatus(
            ready=self.sessions.is_configured(),
            auth_mode=self.sessions.auth_mode,
            session_state=self.sessions.session.state,
            uptime_seconds=time.monotonic() - self._started,
        )

    async def login(self) -> LoginResult:
        try:
            await self.sessions.force_login()
        except GatewayError as e:
            logger.warning("Forced login failed (%s): %s", e.kind, e)
            return LoginResult(success=False, logged_in=False, error=str(e), error_kind=e.kind)

        return LoginResult(success=True, logged_in=self.health().logged_in)
