"""Exceptions raised while resolving the alias index."""

from __future__ import annotations

from pathlib import Path


class AliasIndexError(Exception):
    """Base exception for alias index resolution."""

    pass


class TierUnavailableError(AliasIndexError):
    """Raised when a single tier cannot produce an index."""

    def __init__(self, tier: str, reason: str):
        self.tier = tier
        self.reason = reason
        super().__init__(f"Tier '{tier}' unavailable: {reason}")


class WriteBackError(AliasIndexError):
    """Raised when promoting an index into the local cache fails."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Write-back to {self.path} failed: {reason}")


class AllTiersExhaustedError(AliasIndexError):
    """Raised when no tier yielded an index."""

    def __init__(self, attempted: list[tuple[str, str]]):
        self.attempted = list(attempted)
        summary = "; ".join(f"{name}: {reason}" for name, reason in self.attempted)
        super().__init__(f"No alias index source available ({summary or 'no tiers configured'})")
