from .base import IntranetBackend
from .mock import MockIntranetBackend
from .real import RealIntranetBackend

__all__ = ["IntranetBackend", "MockIntranetBackend", "RealIntranetBackend", "get_backend"]


def get_backend(mock_mode: bool, cache, config: dict, delay_ms: int = 500, failure_rate: float = 0.0, logger=None) -> IntranetBackend:
    """Factory: mock backend in mock mode, otherwise the REST backend built from the intranet config section."""
    if mock_mode:
        return MockIntranetBackend(cache, delay_ms=delay_ms, failure_rate=failure_rate, logger=logger)
    return RealIntranetBackend(
        cache,
        api_url=config.get("api_url") or "",
        api_key=config.get("api_key") or "",
        logger=logger,
    )
