"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class BidStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Bids that still count against a product's demand value
LIVE_BID_STATUSES: tuple[str, ...] = (BidStatus.PENDING.value, BidStatus.ACCEPTED.value)
