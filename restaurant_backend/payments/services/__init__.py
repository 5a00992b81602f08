from .exceptions import PaymentGatewayConfigError, PaymentGatewayError
from .session import PaymentSession, create_payment_session

__all__ = [
    "PaymentGatewayError",
    "PaymentGatewayConfigError",
    "PaymentSession",
    "create_payment_session",
]
