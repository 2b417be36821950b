"""Status Transition Enforcement — the fixed transfer status graph.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return Failure on violation, None on success
    - No transition ever leads back to PENDING; self transitions are illegal
    - Tombstoning is allowed only from terminal statuses

Design Decisions:
    - Graph declared as data (dict of frozensets) so it is reviewable in one place
"""

from transfer_service.core.domain_types import ErrorKind, TransferStatus
from transfer_service.core.result import Failure, fail


ALLOWED_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.PENDING: frozenset({
        TransferStatus.COMPLETED,
        TransferStatus.FAILED,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.COMPLETED: frozenset({TransferStatus.REVERSED}),
    TransferStatus.FAILED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
    TransferStatus.REVERSED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def is_transition_allowed(
    current: TransferStatus, target: TransferStatus,
) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(
    current: TransferStatus, target: TransferStatus,
) -> Failure | None:
    """Validate current -> target against the graph."""
    if is_transition_allowed(current, target):
        return None
    allowed = sorted(s.value for s in ALLOWED_TRANSITIONS[current])
    return fail(
        ErrorKind.INVALID_STATUS_TRANSITION,
        f"Cannot move transfer from '{current.value}' to '{target.value}'.",
        current_status=current.value,
        requested_status=target.value,
        allowed=allowed,
    )


def check_deletable(current: TransferStatus) -> Failure | None:
    """Only transfers in a terminal status may be tombstoned."""
    if current in TERMINAL_STATUSES:
        return None
    return fail(
        ErrorKind.INVALID_STATUS_TRANSITION,
        f"Transfer in status '{current.value}' cannot be deleted; "
        "only terminal transfers can be archived.",
        current_status=current.value,
    )
