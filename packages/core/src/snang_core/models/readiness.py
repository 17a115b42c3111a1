"""Readiness scoring data models.

Inputs are buyer-declared categories only. Unknown or malformed categories
are coerced to the most conservative member of their enum at construction
time, so an incomplete profile can never produce an inflated score.

Two result types exist on purpose:
- ScoredResult carries the internal score and component breakdown and is
  for system/storage use only.
- AdvisoryResult carries band, label and guidance and is the only shape a
  buyer or agent ever receives (built by ``redaction.advisory_view``).
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .audit import AuditEntry


# Band thresholds (inclusive lower bounds)
READY_MIN_SCORE = 70
CAUTION_MIN_SCORE = 50

MAX_SCORE = 100


# =============================================================================
# ENUMERATIONS
# =============================================================================

class EmploymentType(str, Enum):
    """Declared public-service appointment type."""
    PERMANENT = "tetap"
    CONTRACT = "kontrak"
    UNSET = ""


class IncomeRange(str, Enum):
    """Declared monthly income band (RM).

    The lowest band covers everything up to RM 3,000. Older records used
    ``2000-3000`` for the same band; that value is still accepted.
    """
    UP_TO_3000 = "0-3000"
    FROM_3001_TO_4000 = "3001-4000"
    FROM_4001_TO_5000 = "4001-5000"
    FROM_5001_TO_6000 = "5001-6000"
    FROM_6001_TO_8000 = "6001-8000"
    ABOVE_8000 = "8001+"


class ServiceYears(str, Enum):
    """Years in public service."""
    ZERO_TO_TWO = "0-2"
    THREE_TO_FOUR = "3-4"
    FIVE_PLUS = "5+"


class AgeRange(str, Enum):
    """Applicant age band."""
    UNDER_35 = "<35"
    FROM_35_TO_49 = "35-49"
    FROM_50_TO_55 = "50-55"
    FROM_56 = "56+"


class CommitmentRange(str, Enum):
    """Declared existing commitments as a percentage of income (DSR band)."""
    UP_TO_30 = "0-30"
    FROM_31_TO_40 = "31-40"
    FROM_41_TO_50 = "41-50"
    ABOVE_50 = "51+"


class ExistingLoan(str, Enum):
    """Whether the applicant already holds an LPPSA loan."""
    YES = "yes"
    NO = "no"
    UNSET = ""


class ReadinessBand(str, Enum):
    """Advisory classification. The only score-derived value shown to people."""
    READY = "ready"
    CAUTION = "caution"
    NOT_READY = "not_ready"

    @classmethod
    def for_score(cls, score: int) -> "ReadinessBand":
        """Classify a total score into its band."""
        if score >= READY_MIN_SCORE:
            return cls.READY
        if score >= CAUTION_MIN_SCORE:
            return cls.CAUTION
        return cls.NOT_READY


# Accepted spellings that are not enum values
_EMPLOYMENT_ALIASES = {"permanent": "tetap", "contract": "kontrak", "unset": ""}
_INCOME_ALIASES = {"2000-3000": "0-3000", "<=3000": "0-3000", "≤3000": "0-3000"}
_AGE_ALIASES = {"below35": "<35"}
_LOAN_ALIASES = {"unset": ""}


def _coerce(enum_cls: type[Enum], value: Any, aliases: dict[str, str], fallback: Enum) -> Enum:
    """Map a raw value onto ``enum_cls``; anything unrecognised becomes ``fallback``."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        key = aliases.get(key, key)
        try:
            return enum_cls(key)
        except ValueError:
            pass
    return fallback


# =============================================================================
# INPUTS
# =============================================================================

class ReadinessInputs(BaseModel):
    """Buyer-declared inputs for one readiness computation.

    Accepts both snake_case and camelCase keys. Every categorical field
    defaults to, and degrades to, its most conservative category.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    employment_type: EmploymentType = EmploymentType.UNSET
    employment_scheme: str = ""
    income_range: IncomeRange = IncomeRange.UP_TO_3000
    service_years: ServiceYears = ServiceYears.ZERO_TO_TWO
    existing_loan: ExistingLoan = ExistingLoan.UNSET
    age_range: AgeRange = AgeRange.FROM_56
    commitment_range: CommitmentRange = CommitmentRange.ABOVE_50
    has_upload: bool = False
    property_price: Optional[Decimal] = None

    @field_validator("employment_type", mode="before")
    @classmethod
    def coerce_employment_type(cls, v: Any) -> EmploymentType:
        """Undeclared or unknown appointment types score as unset."""
        if v is None:
            return EmploymentType.UNSET
        return _coerce(EmploymentType, v, _EMPLOYMENT_ALIASES, EmploymentType.UNSET)

    @field_validator("income_range", mode="before")
    @classmethod
    def coerce_income_range(cls, v: Any) -> IncomeRange:
        """Unknown income bands score as the lowest band."""
        return _coerce(IncomeRange, v, _INCOME_ALIASES, IncomeRange.UP_TO_3000)

    @field_validator("service_years", mode="before")
    @classmethod
    def coerce_service_years(cls, v: Any) -> ServiceYears:
        """Unknown service length scores as the shortest band."""
        return _coerce(ServiceYears, v, {}, ServiceYears.ZERO_TO_TWO)

    @field_validator("age_range", mode="before")
    @classmethod
    def coerce_age_range(cls, v: Any) -> AgeRange:
        """Unknown age scores with the largest tenure penalty."""
        return _coerce(AgeRange, v, _AGE_ALIASES, AgeRange.FROM_56)

    @field_validator("commitment_range", mode="before")
    @classmethod
    def coerce_commitment_range(cls, v: Any) -> CommitmentRange:
        """Unknown commitment bands score as the heaviest commitment."""
        return _coerce(CommitmentRange, v, {}, CommitmentRange.ABOVE_50)

    @field_validator("existing_loan", mode="before")
    @classmethod
    def coerce_existing_loan(cls, v: Any) -> ExistingLoan:
        """Missing means undeclared; anything unrecognised counts as a loan."""
        if v is None:
            return ExistingLoan.UNSET
        return _coerce(ExistingLoan, v, _LOAN_ALIASES, ExistingLoan.YES)

    @field_validator("employment_scheme", mode="before")
    @classmethod
    def coerce_employment_scheme(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("has_upload", mode="before")
    @classmethod
    def coerce_has_upload(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in {"true", "1", "yes"}
        return False

    @field_validator("property_price", mode="before")
    @classmethod
    def coerce_property_price(cls, v: Any) -> Optional[Decimal]:
        """Non-positive or unparseable prices fall back to the reference price."""
        if v is None or isinstance(v, bool):
            return None
        try:
            price = Decimal(str(v))
        except (InvalidOperation, ValueError):
            return None
        if not price.is_finite() or price <= 0:
            return None
        return price


# =============================================================================
# RESULTS
# =============================================================================

class ScoreBreakdown(BaseModel):
    """Four independently capped scoring components. Internal only."""

    model_config = ConfigDict(frozen=True)

    rule_coverage: int = Field(ge=0, le=30, description="Component A")
    income_pattern: int = Field(ge=0, le=25, description="Component B")
    commitment_signal: int = Field(ge=0, le=25, description="Component C")
    property_context: int = Field(ge=0, le=20, description="Component D")

    @property
    def total(self) -> int:
        """Sum of the components, clamped to 0-100."""
        raw = (
            self.rule_coverage
            + self.income_pattern
            + self.commitment_signal
            + self.property_context
        )
        return max(0, min(MAX_SCORE, raw))


class ScoredResult(BaseModel):
    """Internal readiness result.

    Never serialised into a buyer- or agent-facing payload. Use
    ``redaction.advisory_view`` to obtain the public shape.
    """

    model_config = ConfigDict(frozen=True)

    band: ReadinessBand
    label: str
    guidance: str
    internal_score: int = Field(ge=0, le=MAX_SCORE)
    breakdown: ScoreBreakdown

    @model_validator(mode="after")
    def check_score_consistency(self) -> "ScoredResult":
        """Score must equal the clamped component sum and match its band."""
        if self.internal_score != self.breakdown.total:
            raise ValueError(
                f"internal_score {self.internal_score} does not equal "
                f"component total {self.breakdown.total}"
            )
        if self.band != ReadinessBand.for_score(self.internal_score):
            raise ValueError(
                f"band {self.band.value} does not match score {self.internal_score}"
            )
        return self


class AdvisoryResult(BaseModel):
    """Role-facing readiness result: band, label and guidance only."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    band: ReadinessBand
    label: str
    guidance: str


class DeterminismReport(BaseModel):
    """Outcome of recomputing one input set several times."""

    is_deterministic: bool
    iterations: int = Field(ge=1)
    band: ReadinessBand
    score: int
    input_hash: str


class ScoringRecord(BaseModel):
    """A scored computation with verification metadata, for storage.

    Attributes:
        result: The internal scored result
        input_hash: Canonical hash of the inputs that produced it
        methodology_version: Scoring methodology tag
        dsr_ratio: Declared commitment percentage estimate
        income_declared: Midpoint of the declared income band (RM/month)
        calculated_at: When the computation ran (UTC)
        audit_log: One entry per scoring step
    """

    result: ScoredResult
    input_hash: str
    methodology_version: str
    dsr_ratio: Optional[int] = None
    income_declared: int
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    audit_log: list[AuditEntry] = Field(default_factory=list)

    def to_storage_row(self) -> dict[str, Any]:
        """Columns written back to the case record. System use only."""
        return {
            "readiness_score": self.result.internal_score,
            "readiness_band": self.result.band.value,
            "dsr_ratio": self.dsr_ratio,
            "income_declared": self.income_declared,
            "readiness_computed_at": self.calculated_at.isoformat(),
        }


class RegressionVector(BaseModel):
    """Known-answer input used to guard the scoring formula."""

    name: str
    inputs: ReadinessInputs
    expected_band: ReadinessBand
    expected_score_range: tuple[int, int]


class RegressionOutcome(BaseModel):
    """Result of running one regression vector."""

    name: str
    passed: bool
    expected_band: ReadinessBand
    actual_band: ReadinessBand
    score: int
