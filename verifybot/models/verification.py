"""
Verification decision model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RejectionReason(Enum):
    NOT_CONFIGURED = "not_configured"
    PAUSED = "paused"
    WRONG_CHANNEL = "wrong_channel"


@dataclass(frozen=True)
class VerifyOutcome:
    """Result of the verification policy for one request."""

    approved: bool
    reason: Optional[RejectionReason] = None
    should_rename_target: bool = False

    @classmethod
    def approve(cls, should_rename_target: bool) -> "VerifyOutcome":
        return cls(approved=True, should_rename_target=should_rename_target)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "VerifyOutcome":
        return cls(approved=False, reason=reason)
