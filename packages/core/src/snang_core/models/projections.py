"""Role-facing views of a case.

Every view is built field by field from a Case. Views are frozen and
forbid extra fields, so a field that is not declared here cannot reach a
buyer, agent or developer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .case import (
    CasePhase,
    ConfidenceLevel,
    DocStatus,
    KJStatus,
    Priority,
    Property,
    QueryRisk,
)
from .readiness import AdvisoryResult


class _View(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BuyerDocumentView(_View):
    """Document status as the buyer sees it."""
    id: str
    type: str
    name: str
    status: DocStatus


class AgentDocumentView(_View):
    """Document status with a confidence label in place of the raw value."""
    id: str
    type: str
    name: str
    status: DocStatus
    confidence_label: Optional[ConfidenceLevel] = None


class TacScheduleView(_View):
    """TAC appointment without the secret code."""
    date: str
    time: str
    confirmed: bool
    confirmed_at: Optional[str] = None


class AgentBuyerView(_View):
    """Buyer identity for the agent. Income is a range label only."""
    id: str
    name: str
    phone: str
    occupation: Optional[str] = None
    income_range: Optional[str] = None


class BuyerCaseView(_View):
    id: str
    phase: CasePhase
    property: Property
    readiness: Optional[AdvisoryResult] = None
    documents: list[BuyerDocumentView] = Field(default_factory=list)
    tac_schedule: Optional[TacScheduleView] = None
    created_at: datetime
    updated_at: datetime


class AgentCaseView(_View):
    id: str
    phase: CasePhase
    priority: Priority
    property: Property
    buyer: AgentBuyerView
    readiness: Optional[AdvisoryResult] = None
    documents: list[AgentDocumentView] = Field(default_factory=list)
    tac_schedule: Optional[TacScheduleView] = None
    kj_status: Optional[KJStatus] = None
    kj_days: Optional[int] = None
    lo_expiry: Optional[int] = None
    query_risk: Optional[QueryRisk] = None
    loan_type: str
    created_at: datetime
    updated_at: datetime


class DeveloperAggregates(_View):
    """Project-level statistics. Has no slot for any per-case field."""
    total_cases: int = Field(ge=0)
    counts_by_phase: dict[CasePhase, int] = Field(default_factory=dict)
    conversion_rate: int = Field(ge=0, le=100)
    avg_processing_days: float = Field(default=0.0, ge=0)
