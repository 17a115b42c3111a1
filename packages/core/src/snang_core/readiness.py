"""Deterministic readiness scoring for LPPSA financing cases.

This module provides:
1. calculate_readiness - pure scoring function, the source of truth
2. ReadinessScorer - wraps the pure function with an audit trail and
   verification metadata for storage

The output is an ADVISORY signal, never an eligibility decision. The
internal score and breakdown stay on the system side; role-facing code
receives an AdvisoryResult built by ``redaction.advisory_view``.
"""

import hashlib
import json
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional, Union

import structlog

from .config import ScoringConfig
from .exceptions import ValidationError
from .models import (
    AgeRange,
    AuditEntry,
    CommitmentRange,
    DeterminismReport,
    EmploymentType,
    ExistingLoan,
    IncomeRange,
    ReadinessBand,
    ReadinessInputs,
    RegressionOutcome,
    RegressionVector,
    ScoreBreakdown,
    ScoredResult,
    ScoringRecord,
    ServiceYears,
)
from .scoring_tables import (
    AGE_PENALTY,
    COMMITMENT_MIDPOINTS,
    COMMITMENT_POINTS,
    COMMITMENT_SIGNAL_MAX,
    CONSISTENCY_BONUS,
    EMPLOYMENT_POINTS,
    EXISTING_LOAN_PENALTY,
    INCOME_BASE_POINTS,
    INCOME_PATTERN_MAX,
    PROPERTY_CONTEXT_MAX,
    REFERENCE_PROPERTY_PRICE,
    RULE_COVERAGE_MAX,
    SERVICE_YEARS_POINTS,
    get_band_text,
    get_income_midpoint,
    get_price_multiple_points,
)

logger = structlog.get_logger()

InputsLike = Union[ReadinessInputs, Mapping[str, Any]]

# Fields whose change makes a stored readiness signal stale
INVALIDATION_FIELDS = (
    "income_range",
    "commitment_range",
    "existing_loan",
    "property_price",
)


def _ensure_inputs(inputs: InputsLike) -> ReadinessInputs:
    if isinstance(inputs, ReadinessInputs):
        return inputs
    return ReadinessInputs.model_validate(dict(inputs))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


# =============================================================================
# COMPONENTS
# =============================================================================

def rule_coverage(inputs: ReadinessInputs) -> int:
    """A. Appointment type, service length and age penalty (0-30)."""
    score = (
        EMPLOYMENT_POINTS[inputs.employment_type]
        + SERVICE_YEARS_POINTS[inputs.service_years]
        + AGE_PENALTY[inputs.age_range]
    )
    return _clamp(score, 0, RULE_COVERAGE_MAX)


def income_pattern(inputs: ReadinessInputs) -> int:
    """B. Income band base points plus a consistency bonus (0-25)."""
    score = INCOME_BASE_POINTS[inputs.income_range] + CONSISTENCY_BONUS[inputs.employment_type]
    return _clamp(score, 0, INCOME_PATTERN_MAX)


def commitment_signal(inputs: ReadinessInputs) -> int:
    """C. Declared DSR band lookup (0-25)."""
    return _clamp(COMMITMENT_POINTS[inputs.commitment_range], 0, COMMITMENT_SIGNAL_MAX)


def price_to_income_multiple(inputs: ReadinessInputs) -> Decimal:
    """Property price over annualised income-band midpoint."""
    annual_income = Decimal(get_income_midpoint(inputs.income_range) * 12)
    price = inputs.property_price or REFERENCE_PROPERTY_PRICE
    return price / annual_income


def property_context(inputs: ReadinessInputs) -> int:
    """D. Affordability multiple less the existing-loan penalty (0-20)."""
    score = get_price_multiple_points(price_to_income_multiple(inputs))
    score -= EXISTING_LOAN_PENALTY[inputs.existing_loan]
    return _clamp(score, 0, PROPERTY_CONTEXT_MAX)


def score_components(inputs: InputsLike) -> ScoreBreakdown:
    """Compute the four component scores."""
    inputs = _ensure_inputs(inputs)
    return ScoreBreakdown(
        rule_coverage=rule_coverage(inputs),
        income_pattern=income_pattern(inputs),
        commitment_signal=commitment_signal(inputs),
        property_context=property_context(inputs),
    )


def _result_for(breakdown: ScoreBreakdown) -> ScoredResult:
    score = breakdown.total
    band = ReadinessBand.for_score(score)
    label, guidance = get_band_text(band)
    return ScoredResult(
        band=band,
        label=label,
        guidance=guidance,
        internal_score=score,
        breakdown=breakdown,
    )


def calculate_readiness(inputs: InputsLike) -> ScoredResult:
    """Score declared inputs and classify the total into a band.

    Pure and total: unknown categories have already been degraded to their
    most conservative value by ReadinessInputs, so this never raises for
    any mapping of declared values.

    Args:
        inputs: ReadinessInputs, or a mapping of snake_case/camelCase keys

    Returns:
        ScoredResult (internal; never send to a buyer or agent)
    """
    return _result_for(score_components(inputs))


# =============================================================================
# DETERMINISM
# =============================================================================

def _canonical_price(price: Optional[Decimal]) -> str:
    if price is None:
        return ""
    return format(price.normalize(), "f")


def canonical_inputs(inputs: InputsLike) -> str:
    """Key-order independent JSON form of the inputs."""
    inputs = _ensure_inputs(inputs)
    payload = inputs.model_dump(mode="json", exclude={"property_price"})
    payload["property_price"] = _canonical_price(inputs.property_price)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def hash_inputs(inputs: InputsLike) -> str:
    """Deterministic hash of the inputs for caching and verification.

    Not a security primitive.

    Example:
        >>> hash_inputs({"incomeRange": "4001-5000"}) == hash_inputs({"income_range": "4001-5000"})
        True
    """
    digest = hashlib.sha256(canonical_inputs(inputs).encode("utf-8")).hexdigest()
    return f"inp_{digest[:16]}"


def verify_determinism(inputs: InputsLike, iterations: int = 10) -> DeterminismReport:
    """Recompute the same inputs several times and compare every result.

    Used as a regression guard, not at request time.

    Raises:
        ValidationError: If iterations is less than 1
    """
    if iterations < 1:
        raise ValidationError(
            "iterations must be at least 1",
            field="iterations",
            value=iterations,
            constraint=">= 1",
        )

    inputs = _ensure_inputs(inputs)
    first = calculate_readiness(inputs)
    first_hash = hash_inputs(inputs)
    deterministic = True
    for _ in range(iterations - 1):
        if calculate_readiness(inputs) != first or hash_inputs(inputs) != first_hash:
            deterministic = False

    return DeterminismReport(
        is_deterministic=deterministic,
        iterations=iterations,
        band=first.band,
        score=first.internal_score,
        input_hash=first_hash,
    )


# =============================================================================
# GUIDANCE HELPERS
# =============================================================================

def estimate_dsr(inputs: InputsLike) -> int:
    """Declared commitment band as a DSR percentage estimate."""
    return COMMITMENT_MIDPOINTS[_ensure_inputs(inputs).commitment_range]


def should_invalidate_readiness(previous: InputsLike, current: InputsLike) -> bool:
    """Whether a stored readiness signal is stale after an input change."""
    before = _ensure_inputs(previous)
    after = _ensure_inputs(current)
    return any(getattr(before, field) != getattr(after, field) for field in INVALIDATION_FIELDS)


def get_component_feedback(inputs: InputsLike) -> list[str]:
    """Actionable notes for weak areas, without exposing any points."""
    inputs = _ensure_inputs(inputs)
    feedback: list[str] = []

    if inputs.employment_type == EmploymentType.CONTRACT:
        feedback.append("Lantikan kontrak mungkin memerlukan dokumen tambahan.")
    if inputs.service_years == ServiceYears.ZERO_TO_TWO:
        feedback.append("Tempoh perkhidmatan kurang dari 3 tahun - pertimbangkan untuk menunggu.")
    if inputs.age_range == AgeRange.FROM_56:
        feedback.append("Tempoh pinjaman mungkin lebih pendek disebabkan umur persaraan.")

    if inputs.income_range in (IncomeRange.UP_TO_3000, IncomeRange.FROM_3001_TO_4000):
        feedback.append("Julat pendapatan mungkin mengehadkan jumlah pinjaman.")

    if inputs.commitment_range in (CommitmentRange.FROM_41_TO_50, CommitmentRange.ABOVE_50):
        feedback.append("Komitmen sedia ada agak tinggi - pertimbangkan untuk mengurangkan.")

    if inputs.existing_loan == ExistingLoan.YES:
        feedback.append("Pinjaman LPPSA sedia ada akan diambil kira dalam penilaian.")

    return feedback


# =============================================================================
# REGRESSION VECTORS
# =============================================================================

REGRESSION_VECTORS = (
    RegressionVector(
        name="Optimal Candidate",
        inputs=ReadinessInputs(
            employment_type=EmploymentType.PERMANENT,
            employment_scheme="persekutuan",
            income_range=IncomeRange.ABOVE_8000,
            service_years=ServiceYears.FIVE_PLUS,
            existing_loan=ExistingLoan.NO,
            age_range=AgeRange.FROM_35_TO_49,
            commitment_range=CommitmentRange.UP_TO_30,
            property_price=Decimal("400000"),
        ),
        expected_band=ReadinessBand.READY,
        expected_score_range=(90, 100),
    ),
    RegressionVector(
        name="Mid-Range Candidate",
        inputs=ReadinessInputs(
            employment_type=EmploymentType.PERMANENT,
            employment_scheme="persekutuan",
            income_range=IncomeRange.FROM_4001_TO_5000,
            service_years=ServiceYears.THREE_TO_FOUR,
            existing_loan=ExistingLoan.NO,
            age_range=AgeRange.FROM_35_TO_49,
            commitment_range=CommitmentRange.FROM_41_TO_50,
            property_price=Decimal("450000"),
        ),
        expected_band=ReadinessBand.CAUTION,
        expected_score_range=(50, 69),
    ),
    RegressionVector(
        name="Risk Candidate",
        inputs=ReadinessInputs(
            employment_type=EmploymentType.CONTRACT,
            employment_scheme="swasta",
            income_range=IncomeRange.UP_TO_3000,
            service_years=ServiceYears.ZERO_TO_TWO,
            existing_loan=ExistingLoan.YES,
            age_range=AgeRange.FROM_56,
            commitment_range=CommitmentRange.ABOVE_50,
            property_price=Decimal("600000"),
        ),
        expected_band=ReadinessBand.NOT_READY,
        expected_score_range=(0, 40),
    ),
)


def run_regression_vectors(
    vectors: tuple[RegressionVector, ...] = REGRESSION_VECTORS,
) -> list[RegressionOutcome]:
    """Score each known-answer vector and report whether it still matches."""
    outcomes = []
    for vector in vectors:
        result = calculate_readiness(vector.inputs)
        low, high = vector.expected_score_range
        outcomes.append(RegressionOutcome(
            name=vector.name,
            passed=result.band == vector.expected_band and low <= result.internal_score <= high,
            expected_band=vector.expected_band,
            actual_band=result.band,
            score=result.internal_score,
        ))
    return outcomes


# =============================================================================
# AUDITED SCORER
# =============================================================================

class ReadinessScorer:
    """
    Score readiness with a step-by-step audit trail.

    Produces the same ScoredResult as calculate_readiness, wrapped in a
    ScoringRecord with the input hash, methodology version and one audit
    entry per component, ready to persist on the case record.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize scorer.

        Args:
            config: Scoring settings (default: loaded from environment)
        """
        self.config = config or ScoringConfig()
        self.methodology_version = self.config.methodology_version
        self._audit_log: list[AuditEntry] = []

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "readiness_scoring_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def score(self, inputs: InputsLike) -> ScoringRecord:
        """
        Score declared inputs and record every step.

        Args:
            inputs: ReadinessInputs, or a mapping of declared values

        Returns:
            ScoringRecord for system storage
        """
        self._audit_log = []
        inputs = _ensure_inputs(inputs)

        breakdown = score_components(inputs)

        self._log_step(
            step="rule_coverage",
            input_value=(
                f"employment={inputs.employment_type.value or 'unset'}, "
                f"service={inputs.service_years.value}, age={inputs.age_range.value}"
            ),
            output_value=str(breakdown.rule_coverage),
            source="Component A (0-30)",
        )

        self._log_step(
            step="income_pattern",
            input_value=(
                f"income={inputs.income_range.value}, "
                f"employment={inputs.employment_type.value or 'unset'}"
            ),
            output_value=str(breakdown.income_pattern),
            source="Component B (0-25)",
        )

        self._log_step(
            step="commitment_signal",
            input_value=f"commitment={inputs.commitment_range.value}",
            output_value=str(breakdown.commitment_signal),
            source="Component C (0-25)",
        )

        multiple = price_to_income_multiple(inputs)
        self._log_step(
            step="property_context",
            input_value=(
                f"multiple={multiple:.2f}, "
                f"existing_loan={inputs.existing_loan.value or 'unset'}"
            ),
            output_value=str(breakdown.property_context),
            source="Component D (0-20)",
            notes=None if inputs.property_price else "Reference property price used",
        )

        result = _result_for(breakdown)
        input_hash = hash_inputs(inputs)

        self._log_step(
            step="readiness_band",
            input_value=f"total={breakdown.total}",
            output_value=result.band.value,
            source="Band thresholds (ready >= 70, caution >= 50)",
        )

        logger.info(
            "readiness_scored",
            band=result.band.value,
            input_hash=input_hash,
            methodology_version=self.methodology_version,
        )

        return ScoringRecord(
            result=result,
            input_hash=input_hash,
            methodology_version=self.methodology_version,
            dsr_ratio=estimate_dsr(inputs),
            income_declared=get_income_midpoint(inputs.income_range),
            audit_log=self._audit_log,
        )

    def verify(self, inputs: InputsLike, iterations: Optional[int] = None) -> DeterminismReport:
        """Run the determinism self-check with the configured depth."""
        report = verify_determinism(inputs, iterations or self.config.determinism_iterations)
        if not report.is_deterministic:
            logger.error("readiness_not_deterministic", input_hash=report.input_hash)
        return report
