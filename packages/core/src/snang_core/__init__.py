"""Snang Core - LPPSA readiness scoring and role-based case redaction."""

__version__ = "0.1.0"

from .aggregation import aggregate_for_developer
from .models import AdvisoryResult, Case, Role, ReadinessInputs, ScoredResult
from .permissions import can_access
from .readiness import ReadinessScorer, calculate_readiness, hash_inputs, verify_determinism
from .redaction import advisory_view, project_for_role

__all__ = [
    "calculate_readiness",
    "hash_inputs",
    "verify_determinism",
    "ReadinessScorer",
    "can_access",
    "project_for_role",
    "advisory_view",
    "aggregate_for_developer",
    "ReadinessInputs",
    "ScoredResult",
    "AdvisoryResult",
    "Case",
    "Role",
]
