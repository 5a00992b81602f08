# payments/services/exceptions.py

"""
PAYMENT GATEWAY ERRORS
"""


class PaymentGatewayError(Exception):
    """The gateway rejected a call, returned garbage, or could not be reached."""

    code = "PAYMENT_GATEWAY_ERROR"

    def __init__(self, message: str, *, http_status: int | None = None):
        self.http_status = http_status
        super().__init__(message)


class PaymentGatewayConfigError(PaymentGatewayError):
    """Required gateway settings are missing."""

    code = "PAYMENT_GATEWAY_NOT_CONFIGURED"
