from .base import LmsBackend
from .mock import MockLmsBackend
from .real import RealLmsBackend

__all__ = ["LmsBackend", "MockLmsBackend", "RealLmsBackend", "get_backend"]


def get_backend(mock_mode: bool, cache, config: dict, delay_ms: int = 500, failure_rate: float = 0.0, logger=None) -> LmsBackend:
    """Factory: mock backend in mock mode, otherwise the Blackboard REST backend from the lms config section."""
    if mock_mode:
        return MockLmsBackend(cache, delay_ms=delay_ms, failure_rate=failure_rate, logger=logger)
    return RealLmsBackend(
        cache,
        api_url=config.get("api_url") or "",
        api_key=config.get("api_key") or "",
        api_secret=config.get("api_secret") or "",
        logger=logger,
    )
