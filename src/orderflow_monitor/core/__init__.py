"""Core utilities: logging, the shared exception hierarchy, refresh coalescing."""
from .errors import (
    OrderFlowError,
    BookError,
    OrderAlreadyExists,
    UnknownOrder,
    InvalidOrder,
    InvalidTrade,
    IllegalBoxTransition,
    EventParseError,
)
from .logger import get_logger, get_instrument_logger
from .coalescer import UpdateCoalescer

__all__ = [
    "OrderFlowError",
    "BookError",
    "OrderAlreadyExists",
    "UnknownOrder",
    "InvalidOrder",
    "InvalidTrade",
    "IllegalBoxTransition",
    "EventParseError",
    "get_logger",
    "get_instrument_logger",
    "UpdateCoalescer",
]
