"""
Collaborator factory.
Configures which payment processor and image store the booking core uses.
"""

from typing import Optional

from hotel_booking.core.config import get_settings
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.interfaces.dummy_payment import DummyPaymentProcessor
from hotel_booking.services.interfaces.storage import DataUriImageStorage, ImageStorage

settings = get_settings()

PAYMENT_PROCESSORS = {
    "dummy": DummyPaymentProcessor,
}


def get_payment_processor_for(name: str) -> PaymentProcessor:
    """
    Build the processor registered under `name`.

    Selected by the PAYMENT_PROCESSOR setting; only the simulated
    processor ships with the service.
    """
    try:
        return PAYMENT_PROCESSORS[name]()
    except KeyError:
        raise ValueError(f"Unknown payment processor: {name!r}")


_payment: Optional[PaymentProcessor] = None
_storage: Optional[ImageStorage] = None


def get_payment_processor() -> PaymentProcessor:
    """Payment processor singleton (FastAPI dependency)."""
    global _payment
    if _payment is None:
        _payment = get_payment_processor_for(settings.PAYMENT_PROCESSOR)
    return _payment


def get_image_storage() -> ImageStorage:
    """Image storage singleton (FastAPI dependency)."""
    global _storage
    if _storage is None:
        _storage = DataUriImageStorage()
    return _storage
