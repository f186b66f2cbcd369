class GatewayError(Exception):
    """Base class for every failure the gateway reports as a structured result."""

    kind = "gateway_error"


class AcquisitionError(GatewayError):
    """Raised when a portal session could not be obtained."""

    kind = "acquisition_error"


class ConfigError(AcquisitionError):
    """Raised when no usable credential material is configured."""

    kind = "config_error"


class AuthError(AcquisitionError):
    """Raised when the portal rejects the credentials or the session, even after one retry."""

    kind = "auth_error"


class FormatError(GatewayError):
    """Raised when a voucher code does not split into exactly 3 non-empty segments."""

    kind = "format_error"


class NetworkError(GatewayError):
    """Raised on transport failures, timeouts and unexpected HTTP statuses."""

    kind = "network_error"


class ParseError(GatewayError):
    """Raised when a portal body cannot be classified at all (e.g. it is empty)."""

    kind = "parse_error"
