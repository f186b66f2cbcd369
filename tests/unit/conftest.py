from __future__ import annotations

import pytest

from bonosvip_gateway.services.portal_client import PortalEndpoints
from bonosvip_gateway.services.session_manager import SessionManager
from bonosvip_gateway.services.validation_client import ValidationClient
from bonosvip_gateway.testing.fakes import FakeClock, FakeCredentialSource, FakeTransport

PORTAL_URL = "https://portal.example.invalid"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def endpoints() -> PortalEndpoints:
    return PortalEndpoints(base_url=PORTAL_URL)


@pytest.fixture()
def source() -> FakeCredentialSource:
    return FakeCredentialSource()


@pytest.fixture()
def sessions(source, clock) -> SessionManager:
    return SessionManager(source, clock=clock)


@pytest.fixture()
def client(transport, sessions, endpoints) -> ValidationClient:
    return ValidationClient(
        transport=transport,
        sessions=sessions,
        endpoints=endpoints,
        validator_name="Lido San Telmo",
    )
