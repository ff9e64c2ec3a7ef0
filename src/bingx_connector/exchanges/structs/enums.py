from enum import Enum


class SegmentType(Enum):
    """Independently versioned API family of the venue."""
    SPOT = "spot"
    SWAP = "swap"
    CONTRACT = "contract"


class AccessLevel(Enum):
    """Public (no credentials) or private (signed) call category."""
    PUBLIC = "public"
    PRIVATE = "private"
