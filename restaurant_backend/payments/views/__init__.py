from .callback import PesapalCallbackView
from .session import PaymentSessionView
from .webhook import PesapalWebhookView

__all__ = [
    "PaymentSessionView",
    "PesapalWebhookView",
    "PesapalCallbackView",
]
