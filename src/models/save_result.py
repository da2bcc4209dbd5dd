"""Outcome of a registration save."""
from dataclasses import dataclass
from typing import Optional

from src.models.registration import RegistrationRecord

TIER_REMOTE = "remote"
TIER_LOCAL = "local"

UNCONFIGURED = "unconfigured"
NETWORK_ERROR = "network_error"
DATABASE_ERROR = "database_error"


@dataclass
class SaveResult:
    """Which storage tier holds the authoritative copy after a save."""

    persisted: bool
    tier: str
    record: Optional[RegistrationRecord] = None
    failure_reason: Optional[str] = None

    @property
    def synced(self) -> bool:
        return self.persisted and self.tier == TIER_REMOTE
