"""Global enums shared by the domain, engine and status API."""

from enum import Enum


class Side(str, Enum):
    """Where a position sits relative to the active bin."""
    ABOVE = "ABOVE"  # holds token X, amounts must ascend with bin id
    BELOW = "BELOW"  # holds token Y, amounts must descend with bin id


class MonitorState(str, Enum):
    IDLE = "IDLE"
    MONITORING = "MONITORING"
    STOPPED = "STOPPED"


class PoolStatus(str, Enum):
    NORMAL = "normal"
    CURRENT = "current"
    ADJUSTING = "adjusting"


class StrategyType(str, Enum):
    SPOT = "Spot"
    CURVE = "Curve"
    BID_ASK = "BidAsk"


class AdjustmentOutcome(str, Enum):
    REBALANCED = "REBALANCED"
    REMOVE_FAILED = "REMOVE_FAILED"
    ADD_FAILED = "ADD_FAILED"
