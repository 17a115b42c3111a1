"""Data models for snang-core.

This package provides:
- Readiness inputs, internal and advisory results (readiness.py)
- Case records as loaded from storage (case.py)
- Role-facing case views and developer aggregates (projections.py)
- Scoring audit entries (audit.py)
"""

from snang_core.models.audit import AuditEntry

from snang_core.models.readiness import (
    # Enumerations
    EmploymentType,
    IncomeRange,
    ServiceYears,
    AgeRange,
    CommitmentRange,
    ExistingLoan,
    ReadinessBand,
    # Thresholds
    READY_MIN_SCORE,
    CAUTION_MIN_SCORE,
    # Inputs and results
    ReadinessInputs,
    ScoreBreakdown,
    ScoredResult,
    AdvisoryResult,
    DeterminismReport,
    ScoringRecord,
    RegressionVector,
    RegressionOutcome,
)

from snang_core.models.case import (
    Role,
    CasePhase,
    DocStatus,
    ConfidenceLevel,
    Priority,
    KJStatus,
    QueryRisk,
    PropertyType,
    Document,
    TacSchedule,
    Property,
    BuyerInfo,
    Case,
)

from snang_core.models.projections import (
    BuyerDocumentView,
    AgentDocumentView,
    TacScheduleView,
    AgentBuyerView,
    BuyerCaseView,
    AgentCaseView,
    DeveloperAggregates,
)

__all__ = [
    # Audit
    "AuditEntry",
    # Readiness enumerations
    "EmploymentType",
    "IncomeRange",
    "ServiceYears",
    "AgeRange",
    "CommitmentRange",
    "ExistingLoan",
    "ReadinessBand",
    "READY_MIN_SCORE",
    "CAUTION_MIN_SCORE",
    # Readiness models
    "ReadinessInputs",
    "ScoreBreakdown",
    "ScoredResult",
    "AdvisoryResult",
    "DeterminismReport",
    "ScoringRecord",
    "RegressionVector",
    "RegressionOutcome",
    # Case
    "Role",
    "CasePhase",
    "DocStatus",
    "ConfidenceLevel",
    "Priority",
    "KJStatus",
    "QueryRisk",
    "PropertyType",
    "Document",
    "TacSchedule",
    "Property",
    "BuyerInfo",
    "Case",
    # Views
    "BuyerDocumentView",
    "AgentDocumentView",
    "TacScheduleView",
    "AgentBuyerView",
    "BuyerCaseView",
    "AgentCaseView",
    "DeveloperAggregates",
]
