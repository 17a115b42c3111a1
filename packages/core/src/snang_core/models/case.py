"""Case records as assembled by the case-management layer.

The core only reads these. A Case holds everything known about one
financing case, including fields no human role may see (exact salary,
document confidence, TAC code, internal score).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .readiness import ScoredResult


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Role(str, Enum):
    """Closed set of roles. There are no dynamic roles."""
    BUYER = "buyer"
    AGENT = "agent"
    DEVELOPER = "developer"
    SYSTEM = "system"


class CasePhase(str, Enum):
    """Workflow state of a case."""
    PRESCAN = "PRESCAN"
    PRESCAN_COMPLETE = "PRESCAN_COMPLETE"
    DOCS_PENDING = "DOCS_PENDING"
    DOCS_COMPLETE = "DOCS_COMPLETE"
    IR_REVIEW = "IR_REVIEW"
    TAC_SCHEDULED = "TAC_SCHEDULED"
    TAC_CONFIRMED = "TAC_CONFIRMED"
    SUBMITTED = "SUBMITTED"
    LO_RECEIVED = "LO_RECEIVED"
    KJ_PENDING = "KJ_PENDING"
    COMPLETED = "COMPLETED"


class DocStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ConfidenceLevel(str, Enum):
    """Discrete label shown in place of a raw extraction confidence."""
    HIGH_CONFIDENCE = "HIGH_CONFIDENCE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    NEEDS_REVIEW = "NEEDS_REVIEW"


class Priority(str, Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class KJStatus(str, Enum):
    """Department-head attestation status (self-reported)."""
    PENDING = "pending"
    RECEIVED = "received"
    OVERDUE = "overdue"


class QueryRisk(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PropertyType(str, Enum):
    SUBSALE = "subsale"
    NEW_PROJECT = "new_project"
    LAND_BUILD = "land_build"


# =============================================================================
# CASE COMPONENTS
# =============================================================================

class Document(BaseModel):
    """Uploaded document with its extraction confidence (0.0 to 1.0)."""
    id: str
    type: str
    name: str
    status: DocStatus = DocStatus.PENDING
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    source: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class TacSchedule(BaseModel):
    """Scheduled TAC confirmation step.

    ``code`` is the buyer's secret and is never projected to any role.
    """
    date: str
    time: str
    confirmed: bool = False
    confirmed_at: Optional[str] = None
    code: Optional[str] = None


class Property(BaseModel):
    name: str
    unit: str
    price: Decimal = Field(gt=0)
    type: PropertyType
    location: str


class BuyerInfo(BaseModel):
    """Buyer identity and financial fields.

    ``basic_salary`` is captured once at intake; ``income_range`` is the
    durable representation every role-facing path uses instead.
    """
    id: str
    name: str
    phone: str
    ic: Optional[str] = None
    email: Optional[str] = None
    basic_salary: Optional[Decimal] = Field(default=None, ge=0)
    income_range: Optional[str] = None
    occupation: Optional[str] = None
    employer: Optional[str] = None
    grade: Optional[str] = None


class Case(BaseModel):
    """A financing case. Owned by the case-management layer."""
    id: str
    buyer: BuyerInfo
    property: Property
    phase: CasePhase
    priority: Priority = Priority.P3
    loan_type: str
    loan_type_code: Optional[int] = Field(default=None, ge=1, le=7)
    readiness: Optional[ScoredResult] = None
    documents: list[Document] = Field(default_factory=list)
    tac_schedule: Optional[TacSchedule] = None
    kj_status: Optional[KJStatus] = None
    kj_days: Optional[int] = Field(default=None, ge=0)
    lo_expiry: Optional[int] = None
    query_risk: Optional[QueryRisk] = None
    created_at: datetime
    updated_at: datetime
