"""
Error taxonomy shared by adapters and services.
Each error carries a kind so the boundary layer can map it to a status code.
"""
from typing import Optional


class PortalError(Exception):
    """Base error: kind + message."""
    kind = "internal"

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if kind:
            self.kind = kind

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class UpstreamUnavailable(PortalError):
    """LMS or intranet failed: network, timeout, non-2xx, or simulated failure."""
    kind = "upstream_unavailable"


class NotFound(PortalError):
    kind = "not_found"


class ValidationFailed(PortalError):
    kind = "validation"


class Unauthorized(PortalError):
    """Token missing, invalid, expired or revoked."""
    kind = "unauthorized"


class Conflict(PortalError):
    kind = "conflict"
