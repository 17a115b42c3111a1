"""Request and response contract for the readiness endpoint.

The web layer hands the decoded JSON body to ``evaluate_readiness_request``
and returns the response model as-is. Requests carry declared categories
only, never raw salary figures. Responses carry the advisory band and the
DSR estimate, never the score or its breakdown.

Example:
    response, record = evaluate_readiness_request({
        "employment_type": "tetap",
        "income_range": "4001-5000",
        "commitment_range": "0-30",
        "age_range": "35-49",
        "service_years": "5+",
    })
    body = response.model_dump(mode="json")
    row = record.to_storage_row()   # system side only
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import (
    AgeRange,
    CommitmentRange,
    EmploymentType,
    ExistingLoan,
    IncomeRange,
    ReadinessBand,
    ReadinessInputs,
    ScoringRecord,
    ServiceYears,
)
from .models.readiness import _AGE_ALIASES
from .readiness import ReadinessScorer
from .redaction import advisory_view

logger = structlog.get_logger()

_LEGACY_INCOME_RANGES = {"2000-3000": IncomeRange.UP_TO_3000.value}


class ReadinessRequest(BaseModel):
    """Validated readiness request body.

    Unlike ReadinessInputs, unknown categories are rejected here so the
    caller gets a 400 instead of a silently conservative score. An empty
    employment_type is a valid declaration and scores as unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    case_id: Optional[UUID] = None
    employment_type: EmploymentType
    employment_scheme: str = ""
    service_years: ServiceYears = ServiceYears.ZERO_TO_TWO
    age_range: Optional[AgeRange] = None
    income_range: IncomeRange
    commitment_range: CommitmentRange
    existing_loan: ExistingLoan = ExistingLoan.UNSET
    property_price: Optional[Decimal] = Field(default=None, gt=0)

    @field_validator("income_range", mode="before")
    @classmethod
    def accept_legacy_income_range(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _LEGACY_INCOME_RANGES.get(v, v)
        return v

    @field_validator("age_range", mode="before")
    @classmethod
    def accept_age_alias(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _AGE_ALIASES.get(v, v)
        return v

    def to_inputs(self) -> ReadinessInputs:
        """Scorer inputs. A missing age is scored conservatively."""
        return ReadinessInputs(
            employment_type=self.employment_type,
            employment_scheme=self.employment_scheme,
            service_years=self.service_years,
            age_range=self.age_range,
            income_range=self.income_range,
            commitment_range=self.commitment_range,
            existing_loan=self.existing_loan,
            property_price=self.property_price,
        )


class ReadinessResponse(BaseModel):
    """Externally visible readiness response."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    band: ReadinessBand
    label: str
    guidance: str
    dsr_ratio: Optional[int] = None


def parse_readiness_request(payload: Mapping[str, Any]) -> ReadinessRequest:
    """
    Validate a decoded request body.

    Raises:
        ValidationError: With the first offending field; the submitted
            value itself is not echoed back
    """
    try:
        return ReadinessRequest.model_validate(dict(payload))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(
            f"Invalid readiness request: {field}: {first['msg']}",
            field=field,
            constraint=first["type"],
            details={"error_count": e.error_count()},
        ) from e


def evaluate_readiness_request(
    payload: Mapping[str, Any],
    scorer: Optional[ReadinessScorer] = None,
) -> tuple[ReadinessResponse, ScoringRecord]:
    """
    Validate, score and redact one readiness request.

    Args:
        payload: Decoded JSON body
        scorer: Scorer to use (default: one built from environment settings)

    Returns:
        (response body, scoring record for system storage)

    Raises:
        ValidationError: If the payload is malformed
    """
    request = parse_readiness_request(payload)
    scorer = scorer or ReadinessScorer()
    record = scorer.score(request.to_inputs())

    advisory = advisory_view(record.result)
    response = ReadinessResponse(
        band=advisory.band,
        label=advisory.label,
        guidance=advisory.guidance,
        dsr_ratio=record.dsr_ratio,
    )

    logger.info(
        "readiness_request_evaluated",
        case_id=str(request.case_id) if request.case_id else None,
        band=response.band.value,
        input_hash=record.input_hash,
    )
    return response, record
