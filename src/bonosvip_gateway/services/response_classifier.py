"""
response_classifier.py

Turns the HTML fragment returned by the portal's validation endpoint into a ValidationOutcome.

The portal gives no schema. Every pattern the gateway relies on lives here, so a change in
the portal's markup means changing this module only.

Known risk: any body without the rejection marker is treated as a valid voucher, including
pages the portal never meant as an answer (maintenance pages, login forms).
"""

from __future__ import annotations

import re

from bonosvip_gateway.domain.models import ValidationOutcome
from bonosvip_gateway.utils.errors import ParseError

REJECTION_MARKER = "No es posible validar"
CUSTOMER_LABEL = "Titular del BonoVIP:"
DEFAULT_ERROR_MESSAGE = "No es posible validar este BonoVip."

_TAG = re.compile(r"<[^>]*>")
_CUSTOMER = re.compile(re.escape(CUSTOMER_LABEL) + r"\s*([^<\n]+)")
_ERROR = re.compile(re.escape(REJECTION_MARKER) + r".*?\.([^<]*)", re.IGNORECASE | re.DOTALL)


def is_rejection(body: str) -> bool:
    return REJECTION_MARKER.lower() in body.lower()


def extract_service(body: str) -> str:
    """First non-empty line with markup stripped."""
    for line in body.split("\n"):
        line = line.strip()
        if line:
            return _TAG.sub("", line).strip()
    return ""


def extract_customer(body: str) -> str:
    match = _CUSTOMER.search(body)
    return match.group(1).strip() if match else ""


def extract_error_message(body: str) -> str:
    match = _ERROR.search(body)
    return match.group(0).strip() if match else DEFAULT_ERROR_MESSAGE


def classify(raw_body: str) -> ValidationOutcome:
    """
    What it does:
    - Classifies one validation response.

    Behavior:
    - valid is False iff the body contains the rejection marker (case-insensitive).
    - service/customer are best effort and may be empty.
    - error_message is set only for rejections.
    - Empty or whitespace-only bodies raise ParseError.
    """
    if not isinstance(raw_body, str) or not raw_body.strip():
        raise ParseError("Portal returned an empty validation response")

    rejected = is_rejection(raw_body)
    return ValidationOutcome(
        valid=not rejected,
        service=extract_service(raw_body),
        customer=extract_customer(raw_body),
        error_message=extract_error_message(raw_body) if rejected else None,
        raw_body=raw_body,
    )
