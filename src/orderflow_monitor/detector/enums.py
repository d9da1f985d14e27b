"""
Enumerations for the volume box detector.

Centralized location for all enum types used across the detector.
"""

from enum import Enum


# ============================================================================
# PERIOD ENUMS
# ============================================================================

class PeriodState(Enum):
    """Volume accumulation state."""
    IDLE = "idle"            # Waiting for the first trade of a period
    COUNTING = "counting"    # Accumulating volume and range


# ============================================================================
# BOX ENUMS
# ============================================================================

class BoxDirection(Enum):
    """Which way a box is expected to break out."""
    UP = "up"
    DOWN = "down"


class BoxState(Enum):
    """Box lifecycle. Transitions only ever move forward."""
    PENDING = "pending"      # Proposed, waiting for activation
    ACTIVE = "active"        # Confirmed, drawn and extended on every trade
    REMOVED = "removed"      # Broken out or shut down; terminal
