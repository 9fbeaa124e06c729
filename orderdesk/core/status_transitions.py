"""Status Transitions — order lifecycle table and transition planning.

Invariants:
    - VALID_TRANSITIONS is read-only and built once at import
    - cancelled is terminal; every other state may be cancelled
    - plan_transition() returns >= 1 step for a legal request, raises otherwise
    - more_info_needed -> processing is planned as two steps through submitted

Design Decisions:
    - Planning is PURE (returns TransitionStep list); the lifecycle service applies
      every step inside a single unit of work so the compound case is atomic
    - Timestamps are not decided here: the service stamps submitted_at/completed_at
      from each step's target state
"""

from dataclasses import dataclass
from types import MappingProxyType

from orderdesk.core.domain_types import OrderStatus
from orderdesk.core.errors import InvalidTransitionError

AUTO_PROCESSING_REASON = "Auto-transition to processing"

VALID_TRANSITIONS = MappingProxyType({
    OrderStatus.DRAFT: frozenset({
        OrderStatus.SUBMITTED, OrderStatus.CANCELLED,
    }),
    OrderStatus.SUBMITTED: frozenset({
        OrderStatus.PROCESSING, OrderStatus.MORE_INFO_NEEDED, OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.COMPLETED, OrderStatus.MORE_INFO_NEEDED, OrderStatus.CANCELLED,
    }),
    OrderStatus.MORE_INFO_NEEDED: frozenset({
        OrderStatus.SUBMITTED, OrderStatus.PROCESSING, OrderStatus.CANCELLED,
    }),
    OrderStatus.COMPLETED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.CANCELLED: frozenset(),
})


@dataclass(frozen=True)
class TransitionStep:
    """One status change and the history reason recorded for it."""
    from_status: OrderStatus
    to_status: OrderStatus
    reason: str | None


def _coerce(status: str) -> OrderStatus | None:
    try:
        return OrderStatus(status)
    except ValueError:
        return None


def allowed_transitions(current: str) -> frozenset[OrderStatus]:
    status = _coerce(current)
    if status is None:
        return frozenset()
    return VALID_TRANSITIONS[status]


def is_valid_transition(current: str, requested: str) -> bool:
    target = _coerce(requested)
    return target is not None and target in allowed_transitions(current)


def plan_transition(
    current: str, requested: str, reason: str | None,
) -> list[TransitionStep]:
    """Steps needed to move an order from `current` to `requested`."""
    if not is_valid_transition(current, requested):
        raise InvalidTransitionError(current, requested)

    source, target = OrderStatus(current), OrderStatus(requested)
    if source == OrderStatus.MORE_INFO_NEEDED and target == OrderStatus.PROCESSING:
        return [
            TransitionStep(OrderStatus.MORE_INFO_NEEDED, OrderStatus.SUBMITTED, reason),
            TransitionStep(
                OrderStatus.SUBMITTED, OrderStatus.PROCESSING, AUTO_PROCESSING_REASON,
            ),
        ]
    return [TransitionStep(source, target, reason)]
