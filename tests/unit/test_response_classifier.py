import pytest

from bonosvip_gateway.services.response_classifier import (
    DEFAULT_ERROR_MESSAGE,
    classify,
    extract_service,
)
from bonosvip_gateway.utils.errors import ParseError

ACCEPTED_HTML = """
<div class="servicio"><strong>Cena Show</strong></div>
<p>Titular del BonoVIP: Maria Lopez<br/>Fecha: 12/05/2026</p>
"""


@pytest.mark.unit
def test_rejection_body_keeps_full_error_text():
    body = "No es posible validar el bono. Motivo: vencido."

    outcome = classify(body)

    assert outcome.valid is False
    assert outcome.error_message == "No es posible validar el bono. Motivo: vencido."
    assert outcome.raw_body == body


@pytest.mark.unit
def test_acceptance_body_extracts_service_and_customer():
    outcome = classify("Servicio: Cena Show\nTitular del BonoVIP: Juan Perez")

    assert outcome.valid is True
    assert outcome.service == "Servicio: Cena Show"
    assert outcome.customer == "Juan Perez"
    assert outcome.error_message is None


@pytest.mark.unit
def test_html_acceptance_strips_tags_and_stops_customer_at_markup():
    outcome = classify(ACCEPTED_HTML)

    assert outcome.valid is True
    assert outcome.service == "Cena Show"
    assert outcome.customer == "Maria Lopez"


@pytest.mark.unit
def test_rejection_marker_is_case_insensitive_and_found_anywhere():
    outcome = classify("<div>Resultado</div>\n<p>NO ES POSIBLE VALIDAR este bono. Ya fue usado</p>")

    assert outcome.valid is False
    assert outcome.error_message == "NO ES POSIBLE VALIDAR este bono. Ya fue usado"
    assert outcome.service == "Resultado"


@pytest.mark.unit
def test_rejection_without_sentence_end_uses_default_message():
    outcome = classify("<b>No es posible validar</b>")

    assert outcome.valid is False
    assert outcome.error_message == DEFAULT_ERROR_MESSAGE


@pytest.mark.unit
def test_missing_customer_label_leaves_customer_empty():
    outcome = classify("<div>Spa</div>")

    assert outcome.customer == ""


@pytest.mark.unit
def test_unexpected_page_is_still_classified_valid():
    # No rejection marker means "valid", even for a page that is clearly not an answer.
    outcome = classify("<html><title>Mantenimiento</title></html>")

    assert outcome.valid is True


@pytest.mark.unit
def test_classification_is_idempotent():
    body = "No es posible validar el bono. Motivo: vencido."

    assert classify(body) == classify(body)


@pytest.mark.unit
@pytest.mark.parametrize("body", ["", "   \n\t "])
def test_empty_body_raises_parse_error(body):
    with pytest.raises(ParseError):
        classify(body)


@pytest.mark.unit
def test_extract_service_skips_blank_lines():
    assert extract_service("\n\n   \n  <h3> Masaje </h3>  \nmore") == "Masaje"
