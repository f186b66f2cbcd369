from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from bonosvip_gateway.domain.enums import SessionState
from bonosvip_gateway.utils.errors import FormatError

VOUCHER_SEPARATOR = "-"


@dataclass(frozen=True)
class VoucherCode:
    """
    A voucher code in `H-Q-S` form, e.g. `1332-8584OGDTFXURK-1`.

    Only `h` and `q` are sent to the portal; `s` is a check segment kept for display.
    """

    h: str
    q: str
    s: str

    @classmethod
    def parse(cls, raw: str) -> VoucherCode:
        if not isinstance(raw, str):
            raise FormatError(f"Voucher code must be a string, got {type(raw).__name__}")

        parts = raw.split(VOUCHER_SEPARATOR)
        if len(parts) != 3 or not all(parts):
            raise FormatError("Formato de código inválido. Debe ser: XXXX-CODIGO-X")

        h, q, s = parts
        return cls(h=h, q=q, s=s)

    def __str__(self) -> str:
        return VOUCHER_SEPARATOR.join((self.h, self.q, self.s))


@dataclass
class Session:
    """
    Portal session state. Owned and mutated only by SessionManager.

    Invariant: AUTHENTICATED implies a non-empty token, and acquired_at is set with the token.
    """

    token: str | None = None
    state: SessionState = SessionState.UNAUTHENTICATED
    acquired_at: datetime | None = None

    def mark_acquired(self, token: str, *, at: datetime) -> None:
        if not token:
            raise ValueError("An authenticated session needs a non-empty token")
        self.token = token
        self.acquired_at = at
        self.state = SessionState.AUTHENTICATED

    def mark_expired(self) -> None:
        self.state = SessionState.EXPIRED

    def is_fresh(self, *, now: datetime, ttl: timedelta) -> bool:
        if self.state is not SessionState.AUTHENTICATED or self.acquired_at is None:
            return False
        return now - self.acquired_at <= ttl


@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    service: str
    customer: str
    error_message: str | None
    raw_body: str


@dataclass(frozen=True)
class PortalResponse:
    """What the transport hands back for one call: status, body text and the cookies held afterwards."""

    status: int
    body: str
    cookies: str = ""
