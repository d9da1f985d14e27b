"""Exception hierarchy shared across the monitor.

Protocol errors (duplicate or unknown order ids, malformed events) are
recoverable: the offending event is dropped and every other piece of state
is left untouched. Callers at the ingestion boundary catch `OrderFlowError`
and turn it into an explicit outcome instead of letting it escape.
"""


class OrderFlowError(Exception):
    """Base error for everything raised by orderflow_monitor."""


class BookError(OrderFlowError):
    """Base error for order book protocol violations."""

    def __init__(self, message: str, order_id=None):
        super().__init__(message)
        self.order_id = order_id


class OrderAlreadyExists(BookError):
    """New order event for an id that is already live."""


class UnknownOrder(BookError):
    """Modify or cancel event for an id that is not live."""


class InvalidOrder(BookError):
    """Order event carrying a malformed side, price or size."""


class InvalidTrade(OrderFlowError):
    """Trade with a non-finite price or a negative or non-finite volume."""


class IllegalBoxTransition(OrderFlowError):
    """Attempted to move a range box backwards in its lifecycle."""


class EventParseError(OrderFlowError):
    """Wire message could not be decoded into an event."""


__all__ = [
    "OrderFlowError",
    "BookError",
    "OrderAlreadyExists",
    "UnknownOrder",
    "InvalidOrder",
    "InvalidTrade",
    "IllegalBoxTransition",
    "EventParseError",
]
