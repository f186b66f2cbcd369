import pytest

from bonosvip_gateway.domain.enums import SessionState
from bonosvip_gateway.domain.models import PortalResponse, VoucherCode
from bonosvip_gateway.utils.errors import AuthError, ConfigError, FormatError, NetworkError, ParseError

VALIDATE_PATH = "/php/proc.php"
ACCEPTED = "<div>Cena Show</div>\nTitular del BonoVIP: Juan Perez"
REJECTED = "<div>No es posible validar el bono. Motivo: vencido.</div>"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_valid_code_with_fresh_session(client, transport, source):
    transport.queue(PortalResponse(200, ACCEPTED))

    outcome = await client.submit("1332-8584OGDTFXURK-1")

    assert outcome.valid is True
    assert outcome.service == "Cena Show"
    assert outcome.customer == "Juan Perez"
    assert source.acquire_count == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_request_carries_h_q_validator_and_cookie(client, transport):
    transport.queue(PortalResponse(200, ACCEPTED))

    await client.submit(VoucherCode.parse("1332-8584OGDTFXURK-1"))

    [(path, form, headers, follow)] = transport.calls
    assert path == VALIDATE_PATH
    assert form == {"q": "8584OGDTFXURK", "h": "1332", "validador": "Lido San Telmo"}
    assert headers["Cookie"] == "token-1"
    assert headers["Referer"] == "https://portal.example.invalid/validar-bonosvip.html"
    assert follow is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rejected_voucher_is_an_outcome_not_an_error(client, transport):
    transport.queue(PortalResponse(200, REJECTED))

    outcome = await client.submit("1332-8584OGDTFXURK-1")

    assert outcome.valid is False
    assert outcome.error_message == "No es posible validar el bono. Motivo: vencido."


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_code_fails_before_session_work(client, transport, source):
    with pytest.raises(FormatError):
        await client.submit("1332-8584OGDTFXURK")

    assert source.acquire_count == 0
    assert transport.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_401_then_success_retries_exactly_once(client, transport, source, sessions):
    transport.queue(
        PortalResponse(401, "Unauthorized"),
        PortalResponse(200, ACCEPTED),
    )

    outcome = await client.submit("1332-8584OGDTFXURK-1")

    assert outcome.valid is True
    assert len(transport.calls_to(VALIDATE_PATH)) == 2
    assert source.acquire_count == 2
    assert transport.calls[1][2]["Cookie"] == "token-2"
    assert sessions.session.state is SessionState.AUTHENTICATED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_outcome_reflects_second_response(client, transport):
    transport.queue(
        PortalResponse(401, ""),
        PortalResponse(200, REJECTED),
    )

    outcome = await client.submit("1332-8584OGDTFXURK-1")

    assert outcome.valid is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_two_401s_surface_auth_error_with_bounded_calls(client, transport, source, sessions):
    transport.queue(
        PortalResponse(401, ""),
        PortalResponse(401, ""),
    )

    with pytest.raises(AuthError):
        await client.submit("1332-8584OGDTFXURK-1")

    assert len(transport.calls_to(VALIDATE_PATH)) == 2
    assert source.acquire_count == 2
    assert sessions.session.state is SessionState.EXPIRED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_error_is_not_retried(client, transport, source):
    transport.queue(NetworkError("timeout"))

    with pytest.raises(NetworkError):
        await client.submit("1332-8584OGDTFXURK-1")

    assert len(transport.calls) == 1
    assert source.acquire_count == 1


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("status", [403, 404, 500, 503])
async def test_other_http_errors_become_network_error(client, transport, status):
    transport.queue(PortalResponse(status, "error page"))

    with pytest.raises(NetworkError, match=str(status)):
        await client.submit("1332-8584OGDTFXURK-1")

    assert len(transport.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_acquisition_failure_prevents_request(client, transport, source):
    source.errors.append(ConfigError("missing cookies"))

    with pytest.raises(ConfigError):
        await client.submit("1332-8584OGDTFXURK-1")

    assert transport.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_body_raises_parse_error(client, transport):
    transport.queue(PortalResponse(200, "  "))

    with pytest.raises(ParseError):
        await client.submit("1332-8584OGDTFXURK-1")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_session_is_reused_across_submissions(client, transport, source):
    transport.queue(PortalResponse(200, ACCEPTED), PortalResponse(200, ACCEPTED))

    await client.submit("1332-AAA-1")
    await client.submit("1332-BBB-1")

    assert source.acquire_count == 1
