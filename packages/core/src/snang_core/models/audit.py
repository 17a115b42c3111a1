"""Audit trail models for scoring transparency.

Each scoring step records what went in, what came out, and which rule
produced it, so a stored readiness result can be explained later.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


class AuditEntry(BaseModel):
    """Single scoring step.

    Attributes:
        timestamp: When this entry was created (UTC)
        step: Name of the step (e.g., "rule_coverage")
        input_value: The declared values the step read
        output_value: The points the step produced
        source: Rule reference for the step
        notes: Additional context
    """
    timestamp: datetime = Field(default_factory=_utc_now)
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None

    def model_post_init(self, __context) -> None:
        """Ensure timestamp is timezone-aware."""
        if self.timestamp.tzinfo is None:
            object.__setattr__(
                self,
                'timestamp',
                self.timestamp.replace(tzinfo=timezone.utc)
            )
