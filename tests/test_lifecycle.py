"""
Tests for the booking status state machine.
"""

import pytest

from hotel_booking.models.booking import BookingStatus as S, IdProofStatus
from hotel_booking.services.lifecycle import TRANSITIONS, id_proof_sources_for, sources_for


@pytest.mark.parametrize("current,target", [
    (S.ID_PENDING, S.ID_SUBMITTED),
    (S.ID_SUBMITTED, S.CONFIRMED),
    (S.ID_SUBMITTED, S.REJECTED),
    (S.CONFIRMED, S.COMPLETED),
    (S.PAYMENT_DONE, S.COMPLETED),
    (S.REFUND_PENDING, S.REFUNDED),
])
def test_allowed_transitions(current, target):
    assert current.value in sources_for(target)


@pytest.mark.parametrize("current,target", [
    (S.ID_PENDING, S.CONFIRMED),
    (S.ID_PENDING, S.COMPLETED),
    (S.PAYMENT_DONE, S.ID_SUBMITTED),
    (S.COMPLETED, S.CANCELLED),
    (S.REJECTED, S.ID_SUBMITTED),
    (S.CANCELLED, S.CONFIRMED),
    (S.REFUND_PENDING, S.CANCELLED),
])
def test_forbidden_transitions(current, target):
    assert current.value not in sources_for(target)


def test_every_status_has_an_entry():
    assert set(TRANSITIONS) == set(S)


def test_terminal_statuses():
    terminal = {status for status, targets in TRANSITIONS.items() if not targets}
    assert terminal == {S.COMPLETED, S.REJECTED, S.CANCELLED, S.REFUNDED}


def test_cancellable_statuses():
    assert sources_for(S.CANCELLED) == ["CONFIRMED", "ID_PENDING", "ID_SUBMITTED", "PAYMENT_DONE"]


def test_refund_pending_is_not_cancellable():
    assert S.REFUND_PENDING.value not in sources_for(S.CANCELLED)
    assert sources_for(S.REFUNDED) == ["REFUND_PENDING"]


def test_completable_statuses():
    assert sources_for(S.COMPLETED) == ["CONFIRMED", "PAYMENT_DONE"]


def test_id_proof_machine():
    assert id_proof_sources_for(IdProofStatus.SUBMITTED) == ["PENDING"]
    assert id_proof_sources_for(IdProofStatus.VERIFIED) == ["SUBMITTED"]
    assert id_proof_sources_for(IdProofStatus.PENDING) == []
