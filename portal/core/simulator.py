"""
Latency and failure injection for mock backends.
"""
import asyncio
import random
from typing import Optional


async def simulate_delay(ms: int = 500) -> None:
    """Suspend the calling coroutine for roughly ms milliseconds."""
    await asyncio.sleep(max(ms, 0) / 1000.0)


def simulate_failure(rate: float = 0.1, rng: Optional[random.Random] = None) -> bool:
    """Return True with probability rate (0.0 - 1.0)."""
    if rate <= 0:
        return False
    return (rng or random).random() < rate
