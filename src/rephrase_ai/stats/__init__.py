"""Usage counters and their live broadcast."""

from rephrase_ai.stats.counter import UsageCounter, UsageSnapshot
from rephrase_ai.stats.hub import BroadcastHub

__all__ = ["BroadcastHub", "UsageCounter", "UsageSnapshot"]
