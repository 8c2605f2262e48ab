"""
Congestion Level Model

Coarse three-step congestion classification shared by predictions,
route traffic levels and intersection state.
"""

from enum import Enum


class CongestionLevel(str, Enum):
    """Congestion severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def ordinal(self) -> int:
        """Ordinal encoding (low=1, medium=2, high=3)"""
        return _ORDINALS[self]


_ORDINALS = {
    CongestionLevel.LOW: 1,
    CongestionLevel.MEDIUM: 2,
    CongestionLevel.HIGH: 3,
}
