"""
Connection parameters for a remote Jupyter server.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConnectionInfo:
    """Where a Jupyter server lives and how to authenticate against it."""

    base_url: str
    token: Optional[str] = None
    # Skip TLS certificate verification (self-signed servers)
    allow_unauthorized: bool = False

    def __repr__(self) -> str:
        # Never leak the token into logs
        return f"ConnectionInfo(base_url={self.base_url!r}, has_token={bool(self.token)}, allow_unauthorized={self.allow_unauthorized})"
