"""
Booking status state machine.

    PAYMENT_DONE ──────────────────────────────┬──> COMPLETED
    ID_PENDING ──> ID_SUBMITTED ──> CONFIRMED ─┘
        │               │   └──> REJECTED (full refund)
        └───────────────┴──────────┴──> CANCELLED (full refund)
    REFUND_PENDING ──> REFUNDED  (external payment reconciliation only)

COMPLETED, REJECTED, CANCELLED and REFUNDED are terminal.

The ID-proof sub-record has its own machine:
    PENDING ──> SUBMITTED ──> VERIFIED | REJECTED
A rejected document set is terminal; the guest books again.
"""

from hotel_booking.models.booking import BookingStatus, IdProofStatus

S = BookingStatus

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    S.PAYMENT_DONE: frozenset({S.COMPLETED, S.CANCELLED}),
    S.ID_PENDING: frozenset({S.ID_SUBMITTED, S.CANCELLED}),
    S.ID_SUBMITTED: frozenset({S.CONFIRMED, S.REJECTED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED}),
    # Deliberately not cancellable even though it is not terminal: the refund
    # is already with the processor, and cancelling would refund a second time.
    S.REFUND_PENDING: frozenset({S.REFUNDED}),
    S.COMPLETED: frozenset(),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REFUNDED: frozenset(),
}

ID_PROOF_TRANSITIONS: dict[IdProofStatus, frozenset[IdProofStatus]] = {
    IdProofStatus.PENDING: frozenset({IdProofStatus.SUBMITTED}),
    IdProofStatus.SUBMITTED: frozenset({IdProofStatus.VERIFIED, IdProofStatus.REJECTED}),
    IdProofStatus.VERIFIED: frozenset(),
    IdProofStatus.REJECTED: frozenset(),
}


def sources_for(target: BookingStatus) -> list[str]:
    """Status values from which `target` is reachable, for WHERE status IN (...)."""
    return sorted(status.value for status, targets in TRANSITIONS.items() if target in targets)


def id_proof_sources_for(target: IdProofStatus) -> list[str]:
    return sorted(status.value for status, targets in ID_PROOF_TRANSITIONS.items() if target in targets)