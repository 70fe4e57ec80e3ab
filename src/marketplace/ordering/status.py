"""Order status state machine.

    pending → confirmed → preparing → ready → completed
    any non-terminal status → cancelled

``completed`` and ``cancelled`` are terminal. Producers may move an order
forward along the fulfillment path, skipping steps if they want; who may
cancel, and from where, depends on the actor:

- customers cancel only ``pending`` orders
- producers decline only ``pending`` orders
- a full refund cancels from any non-terminal status
"""

from enum import Enum

from marketplace.errors import InvalidTransition, NotCancellable


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Actor(Enum):
    CUSTOMER = "customer"
    PRODUCER = "producer"
    PAYMENT = "payment"
    SYSTEM = "system"


class DeliveryType(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


FULFILLMENT_PATH = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
]

TERMINAL_STATES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

_CANCELLABLE_BY = {
    Actor.CUSTOMER: frozenset({OrderStatus.PENDING}),
    Actor.PRODUCER: frozenset({OrderStatus.PENDING}),
    Actor.PAYMENT: frozenset(set(OrderStatus) - TERMINAL_STATES),
    Actor.SYSTEM: frozenset(set(OrderStatus) - TERMINAL_STATES),
}


def _coerce(status) -> OrderStatus:
    return status if isinstance(status, OrderStatus) else OrderStatus(status)


def is_terminal(status) -> bool:
    return _coerce(status) in TERMINAL_STATES


def _build_transitions() -> dict[OrderStatus, frozenset[OrderStatus]]:
    transitions = {}
    for position, status in enumerate(FULFILLMENT_PATH):
        forward = set(FULFILLMENT_PATH[position + 1 :])
        if status not in TERMINAL_STATES:
            forward.add(OrderStatus.CANCELLED)
        transitions[status] = frozenset(forward)
    transitions[OrderStatus.CANCELLED] = frozenset()
    return transitions


_VALID_TRANSITIONS = _build_transitions()


def can_transition(current, target) -> bool:
    return _coerce(target) in _VALID_TRANSITIONS[_coerce(current)]


def assert_transition(current, target, actor=Actor.PRODUCER) -> OrderStatus:
    """Return ``target`` as an OrderStatus if ``actor`` may move the order there.

    Raises InvalidTransition for backward, same-status, and out-of-terminal
    moves, and for cancellations the actor is not allowed to make.
    """
    current_status = _coerce(current)
    try:
        target_status = _coerce(target)
    except ValueError:
        raise InvalidTransition(current_status.value, target) from None
    actor = Actor(actor)

    if not can_transition(current_status, target_status):
        raise InvalidTransition(current_status.value, target_status.value)

    if target_status == OrderStatus.CANCELLED and current_status not in _CANCELLABLE_BY[actor]:
        raise InvalidTransition(current_status.value, target_status.value)

    return target_status


def assert_cancellable(current, actor=Actor.CUSTOMER) -> None:
    """Raise NotCancellable unless ``actor`` may cancel an order in ``current``."""
    current_status = _coerce(current)
    if current_status not in _CANCELLABLE_BY[Actor(actor)]:
        raise NotCancellable(current_status.value)
