"""
Simulated payment processor - every charge and refund succeeds.
"""

import uuid

from hotel_booking.services.interfaces.payment import PaymentProcessor, PaymentResult


class DummyPaymentProcessor(PaymentProcessor):
    """
    No gateway - always succeeds.

    Use when:
    - Local development and tests
    - Demo deployments without a merchant account
    """

    name = "dummy"

    async def charge(self, amount: float, reference: str) -> PaymentResult:
        return PaymentResult(succeeded=True, reference=f"dummy_payment_{uuid.uuid4().hex[:12]}")

    async def refund(self, amount: float, reference: str) -> PaymentResult:
        return PaymentResult(succeeded=True, reference=reference)
