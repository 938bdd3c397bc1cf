"""
Deployment status machine.

pending -> in-progress -> completed | failed, and pending -> failed.
completed and failed are terminal.
"""

from typing import Dict, FrozenSet

PENDING = "pending"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
FAILED = "failed"

STATUSES = (PENDING, IN_PROGRESS, COMPLETED, FAILED)
TERMINAL_STATUSES: FrozenSet[str] = frozenset({COMPLETED, FAILED})

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({IN_PROGRESS, FAILED}),
    IN_PROGRESS: frozenset({COMPLETED, FAILED}),
    COMPLETED: frozenset(),
    FAILED: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES
