"""Row lifecycle statuses and the transitions allowed between them."""

from enum import Enum
from typing import Dict, FrozenSet, Union

from ..errors import InvalidTransitionError


class RowStatus(str, Enum):
    """Lifecycle status of a content row."""
    PENDING = "pending"
    QUEUED = "queued"
    TRANSLATING = "translating"
    REVIEW = "review"
    PARTIAL = "partial"
    ERROR = "error"
    APPROVED = "approved"
    REJECTED = "rejected"


class TranslationStatus(str, Enum):
    """Status of a single language slot on a row."""
    PENDING = "pending"
    REVIEW = "review"
    PARTIAL = "partial"
    ERROR = "error"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    """Human review actions applied from the review UI."""
    APPROVE = "approve"
    REJECT = "reject"
    RESET = "reset"


# Re-enqueueing is allowed from every resting state, but only when a caller
# names the row explicitly.
_ENQUEUEABLE = frozenset({
    RowStatus.PENDING,
    RowStatus.REVIEW,
    RowStatus.PARTIAL,
    RowStatus.ERROR,
    RowStatus.APPROVED,
    RowStatus.REJECTED,
})

ALLOWED_TRANSITIONS: Dict[RowStatus, FrozenSet[RowStatus]] = {
    RowStatus.PENDING: frozenset({RowStatus.QUEUED}),
    RowStatus.QUEUED: frozenset({RowStatus.TRANSLATING, RowStatus.PENDING}),
    RowStatus.TRANSLATING: frozenset({
        RowStatus.REVIEW, RowStatus.PARTIAL, RowStatus.ERROR, RowStatus.PENDING,
    }),
    RowStatus.REVIEW: frozenset({RowStatus.APPROVED, RowStatus.REJECTED, RowStatus.QUEUED}),
    RowStatus.PARTIAL: frozenset({RowStatus.APPROVED, RowStatus.REJECTED, RowStatus.QUEUED}),
    RowStatus.ERROR: frozenset({RowStatus.QUEUED}),
    RowStatus.APPROVED: frozenset({RowStatus.QUEUED}),
    RowStatus.REJECTED: frozenset({RowStatus.PENDING, RowStatus.QUEUED}),
}

REVIEW_TARGETS: Dict[ReviewAction, RowStatus] = {
    ReviewAction.APPROVE: RowStatus.APPROVED,
    ReviewAction.REJECT: RowStatus.REJECTED,
    ReviewAction.RESET: RowStatus.PENDING,
}


def can_transition(current: Union[RowStatus, str], target: Union[RowStatus, str]) -> bool:
    """Check whether a row may move from ``current`` to ``target``.

    Staying in the same state is always allowed; manual edits overwrite
    translation text without changing the status.
    """
    current = RowStatus(current)
    target = RowStatus(target)
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: Union[RowStatus, str], target: Union[RowStatus, str]) -> RowStatus:
    """Return ``target`` as a RowStatus, raising InvalidTransitionError if not allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(RowStatus(current).value, RowStatus(target).value)
    return RowStatus(target)


def is_enqueueable(status: Union[RowStatus, str]) -> bool:
    """Rows that are already queued or translating cannot be queued twice."""
    return RowStatus(status) in _ENQUEUEABLE


def review_target(current: Union[RowStatus, str], action: Union[ReviewAction, str]) -> RowStatus:
    """Resolve the status a review action leads to from ``current``."""
    target = REVIEW_TARGETS[ReviewAction(action)]
    return ensure_transition(current, target)
