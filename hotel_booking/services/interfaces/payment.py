"""
Payment processor interface.
Booking logic only needs "charge this amount" and "refund this amount".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PaymentResult:
    succeeded: bool
    reference: Optional[str] = None
    message: Optional[str] = None


class PaymentProcessor(ABC):
    """
    Interface for payment processors.

    Implementations:
    - DummyPaymentProcessor: simulated payments, always succeed
    """

    name: str = "abstract"

    @abstractmethod
    async def charge(self, amount: float, reference: str) -> PaymentResult:
        """
        Collect payment for a booking.

        Args:
            amount: Total cost of the stay
            reference: Caller-side idempotency reference

        Returns:
            PaymentResult; succeeded=False means the guest was not charged
        """
        pass

    @abstractmethod
    async def refund(self, amount: float, reference: str) -> PaymentResult:
        """
        Return money for a cancelled or rejected booking.

        Args:
            amount: Amount to refund
            reference: Payment reference from the original charge
        """
        pass
