from __future__ import annotations

from enum import StrEnum


class SessionState(StrEnum):
    UNAUTHENTICATED = "Unauthenticated"
    AUTHENTICATED = "Authenticated"
    EXPIRED = "Expired"


class AuthMode(StrEnum):
    COOKIES = "cookies"
    LOGIN = "login"
