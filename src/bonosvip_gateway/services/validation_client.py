from __future__ import annotations

import logging
from http import HTTPStatus

from bonosvip_gateway.domain.models import PortalResponse, ValidationOutcome, VoucherCode
from bonosvip_gateway.services.portal_client import USER_AGENT, PortalEndpoints, PortalTransport
from bonosvip_gateway.services.response_classifier import classify
from bonosvip_gateway.services.session_manager import SessionManager
from bonosvip_gateway.utils.errors import AuthError, NetworkError

logger = logging.getLogger(__name__)

# First try plus one retry after a 401.
MAX_ATTEMPTS = 2


class ValidationClient:
    """
    What it does:
    - Submits one voucher code to the portal and classifies the answer.

    Behavior:
    - Malformed codes raise FormatError before any session or network work.
    - HTTP 401 invalidates the session and retries; after MAX_ATTEMPTS rejections -> AuthError.
    - Any other HTTP status >= 400 -> NetworkError, no retry. Transport errors propagate as NetworkError.
    """

    def __init__(
        self,
        *,
        transport: PortalTransport,
        sessions: SessionManager,
        endpoints: PortalEndpoints,
        validator_name: str,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self.transport = transport
        self.sessions = sessions
        self.endpoints = endpoints
        self.validator_name = validator_name
        self.max_attempts = max_attempts

    async def submit(self, code: VoucherCode | str) -> ValidationOutcome:
        if not isinstance(code, VoucherCode):
            code = VoucherCode.parse(code)

        logger.info("Validating voucher h=%s q=%s", code.h, code.q)

        for attempt in range(1, self.max_attempts + 1):
            session = await self.sessions.ensure_valid()
            response = await self._post(code, session.token or "")

            if response.status != HTTPStatus.UNAUTHORIZED:
                break

            logger.warning("Portal answered 401 (attempt %d/%d)", attempt, self.max_attempts)
            self.sessions.invalidate()
        else:
            raise AuthError(
                f"Portal rejected the session {self.max_attempts} times; giving up on {code}"
            )

        if response.status >= HTTPStatus.BAD_REQUEST:
            raise NetworkError(f"Portal validation failed with HTTP {response.status}")

        outcome = classify(response.body)
        logger.info("Voucher %s is %s", code, "VALID" if outcome.valid else "INVALID")
        return outcome

    async def _post(self, code: VoucherCode, token: str) -> PortalResponse:
        return await self.transport.post_form(
            self.endpoints.validate_path,
            self.endpoints.validate_form(h=code.h, q=code.q, validator_name=self.validator_name),
            headers={
                "Referer": self.endpoints.validate_referer,
                "User-Agent": USER_AGENT,
                "Cookie": token,
            },
        )
