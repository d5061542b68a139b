"""XCM protocol layer: descriptors, event classification and orchestrators."""

from .balances import BalanceReader, balance_record
from .descriptors import build_asset, build_location
from .events import EVENT_BUCKETS, classify_events, event_names
from .hrmp import HrmpChannels
from .transfer import XcmTransfers

__all__ = [
    "EVENT_BUCKETS",
    "BalanceReader",
    "HrmpChannels",
    "XcmTransfers",
    "balance_record",
    "build_asset",
    "build_location",
    "classify_events",
    "event_names",
]
