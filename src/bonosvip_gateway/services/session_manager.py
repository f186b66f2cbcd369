from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from bonosvip_gateway.domain.enums import AuthMode, SessionState
from bonosvip_gateway.domain.models import Session
from bonosvip_gateway.services.portal_client import CredentialSource

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """
    What it does:
    - Owns the portal Session and decides when it must be (re-)acquired.

    Why it matters:
    - Validation calls never deal with login or cookie expiry themselves.

    Behavior:
    - ensure_valid() reuses an AUTHENTICATED session younger than `ttl`, otherwise acquires
      a new token from the CredentialSource.
    - invalidate() marks the session EXPIRED; the next ensure_valid() re-acquires.
    - No lock: two tasks that both see an expired session may both acquire. Acquisition is
      a re-login or a config read, so repeating it is harmless.
    """

    def __init__(
        self,
        source: CredentialSource,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.source = source
        self.ttl = ttl
        self._clock = clock
        self._session = Session()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def auth_mode(self) -> AuthMode:
        return self.source.mode

    def is_configured(self) -> bool:
        return self.source.is_configured()

    async def ensure_valid(self) -> Session:
        session = self._session
        now = self._clock()

        if session.is_fresh(now=now, ttl=self.ttl):
            return session

        if session.state is SessionState.AUTHENTICATED:
            logger.info("Portal session older than %s, renewing", self.ttl)
            session.mark_expired()
        else:
            logger.info("Portal session %s, acquiring", session.state.value.lower())

        token = await self.source.acquire()
        session.mark_acquired(token, at=self._clock())
        return session

    def invalidate(self) -> None:
        logger.warning("Portal session invalidated")
        self._session.mark_expired()

    async def force_login(self) -> Session:
        self.invalidate()
        return await self.ensure_valid()
