"""
Collaborator interfaces for dependency inversion.
Allows swapping payment gateways and image stores without touching booking logic.
"""

from .payment import PaymentProcessor, PaymentResult
from .dummy_payment import DummyPaymentProcessor
from .storage import ImageStorage, DataUriImageStorage

__all__ = [
    'PaymentProcessor', 'PaymentResult', 'DummyPaymentProcessor',
    'ImageStorage', 'DataUriImageStorage',
]
