"""Tests for the row state machine."""

import pytest

from src.wordflow.errors import InvalidTransitionError
from src.wordflow.models.status import (
    ReviewAction,
    RowStatus,
    can_transition,
    ensure_transition,
    is_enqueueable,
    review_target,
)


class TestTransitions:
    """Test allowed and forbidden status changes."""

    @pytest.mark.parametrize("current,target", [
        ("pending", "queued"),
        ("queued", "translating"),
        ("translating", "review"),
        ("translating", "partial"),
        ("translating", "error"),
        ("queued", "pending"),
        ("translating", "pending"),
        ("review", "approved"),
        ("partial", "rejected"),
        ("rejected", "pending"),
        ("approved", "queued"),
        ("error", "queued"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("pending", "review"),
        ("pending", "approved"),
        ("queued", "review"),
        ("error", "approved"),
        ("approved", "rejected"),
        ("review", "translating"),
    ])
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(InvalidTransitionError):
            ensure_transition(current, target)

    def test_same_state_is_allowed(self):
        for status in RowStatus:
            assert can_transition(status, status)

    def test_ensure_returns_enum(self):
        assert ensure_transition("review", "approved") is RowStatus.APPROVED


class TestEnqueueable:
    """Test which rows can be queued."""

    def test_busy_rows(self):
        assert not is_enqueueable(RowStatus.QUEUED)
        assert not is_enqueueable(RowStatus.TRANSLATING)

    @pytest.mark.parametrize("status", ["pending", "review", "partial", "error", "approved", "rejected"])
    def test_resting_rows(self, status):
        assert is_enqueueable(status)


class TestReviewTarget:
    """Test review actions."""

    def test_approve_from_review(self):
        assert review_target(RowStatus.REVIEW, ReviewAction.APPROVE) == RowStatus.APPROVED

    def test_reject_partial(self):
        assert review_target("partial", "reject") == RowStatus.REJECTED

    def test_reset_rejected(self):
        assert review_target("rejected", "reset") == RowStatus.PENDING

    def test_approve_pending_is_invalid(self):
        with pytest.raises(InvalidTransitionError):
            review_target("pending", "approve")
