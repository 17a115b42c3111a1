"""Tests for readiness scoring."""

import re
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from structlog.testing import capture_logs

from snang_core.config import ScoringConfig
from snang_core.exceptions import ValidationError
from snang_core.models import (
    AgeRange,
    CommitmentRange,
    EmploymentType,
    ExistingLoan,
    IncomeRange,
    ReadinessBand,
    ReadinessInputs,
    ScoreBreakdown,
    ScoredResult,
    ServiceYears,
)
from snang_core.readiness import (
    REGRESSION_VECTORS,
    ReadinessScorer,
    calculate_readiness,
    estimate_dsr,
    get_component_feedback,
    hash_inputs,
    price_to_income_multiple,
    run_regression_vectors,
    score_components,
    should_invalidate_readiness,
    verify_determinism,
)


class TestComponents:
    """Each component follows its point table and cap."""

    def test_base_profile_components(self, base_inputs: dict):
        """Price multiple 8.33 earns 10 property points, total 81."""
        breakdown = score_components(base_inputs)

        assert breakdown.rule_coverage == 30
        assert breakdown.income_pattern == 16
        assert breakdown.commitment_signal == 25
        assert breakdown.property_context == 10
        assert breakdown.total == 81

    @pytest.mark.parametrize(
        "overrides,expected",
        [
            ({"employment_type": "kontrak"}, 18),
            ({"age_range": "50-55"}, 28),
            ({"age_range": "56+"}, 25),
            ({"service_years": "0-2"}, 22),
            ({"service_years": "3-4"}, 26),
        ],
    )
    def test_rule_coverage(self, base_inputs: dict, overrides: dict, expected: int):
        """Appointment and service points less the age penalty."""
        assert score_components({**base_inputs, **overrides}).rule_coverage == expected

    @pytest.mark.parametrize(
        "overrides,expected",
        [
            ({"income_range": "8001+"}, 25),
            ({"income_range": "8001+", "employment_type": "kontrak"}, 21),
            ({"income_range": "0-3000", "employment_type": "kontrak"}, 8),
            ({"employment_type": "kontrak"}, 12),
        ],
    )
    def test_income_pattern(self, base_inputs: dict, overrides: dict, expected: int):
        """Band base points plus the consistency bonus, capped at 25."""
        assert score_components({**base_inputs, **overrides}).income_pattern == expected

    @pytest.mark.parametrize(
        "commitment,expected",
        [("0-30", 25), ("31-40", 18), ("41-50", 10), ("51+", 4)],
    )
    def test_commitment_signal(self, base_inputs: dict, commitment: str, expected: int):
        """Commitment is a direct lookup."""
        inputs = {**base_inputs, "commitment_range": commitment}
        assert score_components(inputs).commitment_signal == expected

    def test_low_price_multiple_earns_full_property_points(self, base_inputs: dict):
        """RM 200,000 against RM 54,000 a year is under 5x."""
        inputs = {**base_inputs, "property_price": 200000}
        assert score_components(inputs).property_context == 20

    def test_existing_loan_costs_exactly_eight(self, base_inputs: dict):
        """Only the property component moves when an LPPSA loan exists."""
        without_loan = score_components(base_inputs)
        with_loan = score_components({**base_inputs, "existing_loan": "yes"})

        assert without_loan.property_context - with_loan.property_context == 8
        assert with_loan.rule_coverage == without_loan.rule_coverage
        assert with_loan.income_pattern == without_loan.income_pattern
        assert with_loan.commitment_signal == without_loan.commitment_signal

    def test_existing_loan_penalty_floors_at_zero(self, base_inputs: dict):
        """5 base points less 8 clamps to 0."""
        inputs = {**base_inputs, "property_price": 600000, "existing_loan": "yes"}
        assert score_components(inputs).property_context == 0

    def test_reference_price_used_when_missing(self, base_inputs: dict):
        """A missing price is treated as RM 450,000."""
        inputs = {**base_inputs, "property_price": None}
        assert price_to_income_multiple(ReadinessInputs(**inputs)) == (
            Decimal("450000") / Decimal("54000")
        )
        assert score_components(inputs).property_context == 10


class TestBands:
    """Band thresholds at 70 and 50."""

    def test_score_70_is_ready(self, base_inputs: dict):
        """30 + 16 + 4 + 20."""
        result = calculate_readiness({
            **base_inputs,
            "commitment_range": "51+",
            "property_price": 200000,
        })
        assert result.internal_score == 70
        assert result.band == ReadinessBand.READY

    def test_score_69_is_caution(self, base_inputs: dict):
        """28 + 16 + 25 + 0."""
        result = calculate_readiness({
            **base_inputs,
            "age_range": "50-55",
            "existing_loan": "yes",
            "property_price": 600000,
        })
        assert result.internal_score == 69
        assert result.band == ReadinessBand.CAUTION

    def test_score_50_is_caution(self, base_inputs: dict):
        """30 + 16 + 4 + 0."""
        result = calculate_readiness({
            **base_inputs,
            "commitment_range": "51+",
            "existing_loan": "yes",
            "property_price": 600000,
        })
        assert result.internal_score == 50
        assert result.band == ReadinessBand.CAUTION

    def test_score_49_is_not_ready(self, base_inputs: dict):
        """30 + 13 + 4 + 2."""
        result = calculate_readiness({
            **base_inputs,
            "income_range": "3001-4000",
            "commitment_range": "51+",
            "existing_loan": "yes",
            "property_price": 300000,
        })
        assert result.internal_score == 49
        assert result.band == ReadinessBand.NOT_READY

    @pytest.mark.parametrize(
        "score,band",
        [
            (100, ReadinessBand.READY),
            (70, ReadinessBand.READY),
            (69, ReadinessBand.CAUTION),
            (50, ReadinessBand.CAUTION),
            (49, ReadinessBand.NOT_READY),
            (0, ReadinessBand.NOT_READY),
        ],
    )
    def test_for_score(self, score: int, band: ReadinessBand):
        """Thresholds are inclusive lower bounds."""
        assert ReadinessBand.for_score(score) == band

    def test_label_and_guidance_follow_band(self, base_inputs: dict):
        """Text is derived from the band only."""
        result = calculate_readiness(base_inputs)

        assert result.label == "READY TO CONTINUE"
        assert result.guidance.startswith("Anda boleh meneruskan")


class TestConservativeInputs:
    """Unknown or missing categories never inflate the score."""

    def test_empty_inputs_score_lowest_branches(self):
        """Nothing declared: 0 + 5 + 4 + 5."""
        inputs = ReadinessInputs()

        assert inputs.employment_type == EmploymentType.UNSET
        assert inputs.age_range == AgeRange.FROM_56
        assert inputs.commitment_range == CommitmentRange.ABOVE_50
        assert calculate_readiness({}).internal_score == 14

    def test_unknown_values_coerced(self):
        """Garbage maps to the most conservative member."""
        inputs = ReadinessInputs(
            employment_type="freelance",
            income_range="lots",
            service_years=None,
            age_range="unknown",
            commitment_range=75,
            existing_loan="maybe",
            property_price="abc",
        )

        assert inputs.employment_type == EmploymentType.UNSET
        assert inputs.income_range == IncomeRange.UP_TO_3000
        assert inputs.service_years == ServiceYears.ZERO_TO_TWO
        assert inputs.age_range == AgeRange.FROM_56
        assert inputs.commitment_range == CommitmentRange.ABOVE_50
        assert inputs.existing_loan == ExistingLoan.YES
        assert inputs.property_price is None

    def test_missing_loan_is_undeclared(self):
        """None is not treated as an existing loan."""
        assert ReadinessInputs(existing_loan=None).existing_loan == ExistingLoan.UNSET

    @pytest.mark.parametrize("price", [0, -100, "0", True, "NaN", "Infinity"])
    def test_invalid_price_falls_back(self, price):
        """Non-positive, boolean and non-finite prices are dropped."""
        assert ReadinessInputs(property_price=price).property_price is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2000-3000", IncomeRange.UP_TO_3000),
            ("≤3000", IncomeRange.UP_TO_3000),
            (" 4001-5000 ", IncomeRange.FROM_4001_TO_5000),
        ],
    )
    def test_income_aliases(self, value: str, expected: IncomeRange):
        """Legacy spellings of the lowest band are accepted."""
        assert ReadinessInputs(income_range=value).income_range == expected

    def test_aliases_and_camel_case(self):
        """English spellings and camelCase keys are accepted."""
        inputs = ReadinessInputs.model_validate({
            "employmentType": "Permanent",
            "ageRange": "below35",
            "existingLoan": "unset",
        })

        assert inputs.employment_type == EmploymentType.PERMANENT
        assert inputs.age_range == AgeRange.UNDER_35
        assert inputs.existing_loan == ExistingLoan.UNSET

    def test_never_raises_for_malformed_mapping(self):
        """The scorer is total over any mapping of declared values."""
        result = calculate_readiness({
            "incomeRange": 42,
            "ageRange": None,
            "propertyPrice": [1, 2],
            "hasUpload": "yes",
        })
        assert result.band == ReadinessBand.NOT_READY


class TestDeterminism:
    """Same inputs, same result and hash."""

    def test_hash_format(self, base_inputs: dict):
        """Hashes are short prefixed hex digests."""
        assert re.fullmatch(r"inp_[0-9a-f]{16}", hash_inputs(base_inputs))

    def test_hash_ignores_key_order_and_casing(self, base_inputs: dict):
        """Reordered and camelCase keys hash identically."""
        reordered = dict(reversed(list(base_inputs.items())))
        camel = {
            "employmentType": "tetap",
            "employmentScheme": "persekutuan",
            "serviceYears": "5+",
            "ageRange": "35-49",
            "incomeRange": "4001-5000",
            "commitmentRange": "0-30",
            "existingLoan": "no",
            "propertyPrice": "450000.00",
        }

        assert hash_inputs(reordered) == hash_inputs(base_inputs)
        assert hash_inputs(camel) == hash_inputs(base_inputs)
        assert calculate_readiness(camel) == calculate_readiness(base_inputs)

    def test_hash_changes_with_inputs(self, base_inputs: dict):
        """Different declarations give different hashes."""
        changed = {**base_inputs, "income_range": "5001-6000"}
        assert hash_inputs(changed) != hash_inputs(base_inputs)

    def test_verify_determinism(self, base_inputs: dict):
        """Repeated scoring agrees with itself."""
        report = verify_determinism(base_inputs, iterations=25)

        assert report.is_deterministic is True
        assert report.iterations == 25
        assert report.band == ReadinessBand.READY
        assert report.score == 81
        assert report.input_hash == hash_inputs(base_inputs)

    def test_verify_determinism_rejects_zero_iterations(self, base_inputs: dict):
        """At least one computation is required."""
        with pytest.raises(ValidationError) as exc_info:
            verify_determinism(base_inputs, iterations=0)

        assert exc_info.value.field == "iterations"


class TestResultModels:
    """Internal result invariants."""

    def test_score_must_match_breakdown(self):
        """A score that disagrees with its components is rejected."""
        breakdown = ScoreBreakdown(
            rule_coverage=30, income_pattern=16, commitment_signal=25, property_context=10,
        )
        with pytest.raises(PydanticValidationError):
            ScoredResult(
                band=ReadinessBand.READY,
                label="READY TO CONTINUE",
                guidance="-",
                internal_score=91,
                breakdown=breakdown,
            )

    def test_band_must_match_score(self):
        """A band that disagrees with the score is rejected."""
        breakdown = ScoreBreakdown(
            rule_coverage=30, income_pattern=16, commitment_signal=25, property_context=10,
        )
        with pytest.raises(PydanticValidationError):
            ScoredResult(
                band=ReadinessBand.CAUTION,
                label="CONTINUE WITH CAUTION",
                guidance="-",
                internal_score=81,
                breakdown=breakdown,
            )

    def test_component_caps_enforced(self):
        """Components cannot exceed their maximum."""
        with pytest.raises(PydanticValidationError):
            ScoreBreakdown(
                rule_coverage=31, income_pattern=0, commitment_signal=0, property_context=0,
            )


class TestGuidanceHelpers:
    """DSR estimate, invalidation and feedback."""

    @pytest.mark.parametrize(
        "commitment,expected",
        [("0-30", 15), ("31-40", 35), ("41-50", 45), ("51+", 60)],
    )
    def test_estimate_dsr(self, base_inputs: dict, commitment: str, expected: int):
        """DSR is the midpoint of the declared band."""
        assert estimate_dsr({**base_inputs, "commitment_range": commitment}) == expected

    @pytest.mark.parametrize(
        "field,value",
        [
            ("income_range", "5001-6000"),
            ("commitment_range", "31-40"),
            ("existing_loan", "yes"),
            ("property_price", 500000),
        ],
    )
    def test_invalidating_changes(self, base_inputs: dict, field: str, value):
        """Financial declarations make a stored result stale."""
        assert should_invalidate_readiness(base_inputs, {**base_inputs, field: value})

    def test_non_financial_changes_keep_result(self, base_inputs: dict):
        """Scheme and upload flags do not invalidate."""
        current = {**base_inputs, "employment_scheme": "negeri", "has_upload": True}
        assert not should_invalidate_readiness(base_inputs, current)

    def test_strong_profile_has_no_feedback(self, base_inputs: dict):
        """Nothing to flag for the base profile."""
        assert get_component_feedback(base_inputs) == []

    def test_weak_profile_feedback(self):
        """Every weak area is named."""
        risk = REGRESSION_VECTORS[2].inputs
        feedback = get_component_feedback(risk)

        assert len(feedback) == 6
        assert any("LPPSA" in line for line in feedback)
        assert any("kontrak" in line for line in feedback)


class TestRegressionVectors:
    """Known-answer vectors still land in their bands."""

    def test_all_vectors_pass(self):
        """Optimal, mid-range and risk candidates."""
        outcomes = run_regression_vectors()

        assert [o.name for o in outcomes] == [v.name for v in REGRESSION_VECTORS]
        assert all(o.passed for o in outcomes)
        assert [o.score for o in outcomes] == [100, 62, 17]

    def test_failing_vector_reported(self):
        """A vector with the wrong expectation is flagged, not raised."""
        vector = REGRESSION_VECTORS[0].model_copy(
            update={"expected_band": ReadinessBand.NOT_READY}
        )
        outcome = run_regression_vectors((vector,))[0]

        assert outcome.passed is False
        assert outcome.actual_band == ReadinessBand.READY


class TestReadinessScorer:
    """Audited scoring."""

    @pytest.fixture
    def scorer(self) -> ReadinessScorer:
        return ReadinessScorer(ScoringConfig(methodology_version="v3.6.1", determinism_iterations=5))

    def test_record_matches_pure_function(self, scorer: ReadinessScorer, base_inputs: dict):
        """The scorer adds metadata but not different numbers."""
        record = scorer.score(base_inputs)

        assert record.result == calculate_readiness(base_inputs)
        assert record.input_hash == hash_inputs(base_inputs)
        assert record.methodology_version == "v3.6.1"
        assert record.dsr_ratio == 15
        assert record.income_declared == 4500

    def test_audit_log_populated(self, scorer: ReadinessScorer, base_inputs: dict):
        """One entry per component plus the band."""
        record = scorer.score(base_inputs)

        steps = [entry.step for entry in record.audit_log]
        assert steps == [
            "rule_coverage",
            "income_pattern",
            "commitment_signal",
            "property_context",
            "readiness_band",
        ]
        assert record.audit_log[3].output_value == "10"
        assert all(entry.timestamp.tzinfo is not None for entry in record.audit_log)

    def test_reference_price_noted(self, scorer: ReadinessScorer, base_inputs: dict):
        """The audit trail says when no price was declared."""
        record = scorer.score({**base_inputs, "property_price": None})
        assert record.audit_log[3].notes == "Reference property price used"

    def test_audit_log_reset_between_runs(self, scorer: ReadinessScorer, base_inputs: dict):
        """Each record carries only its own steps."""
        scorer.score(base_inputs)
        record = scorer.score(base_inputs)
        assert len(record.audit_log) == 5

    def test_storage_row(self, scorer: ReadinessScorer, base_inputs: dict):
        """Persistence payload for the case record."""
        row = scorer.score(base_inputs).to_storage_row()

        assert row["readiness_score"] == 81
        assert row["readiness_band"] == "ready"
        assert row["dsr_ratio"] == 15
        assert row["income_declared"] == 4500
        assert "readiness_computed_at" in row

    def test_logs_each_step(self, scorer: ReadinessScorer, base_inputs: dict):
        """Steps and the final band are logged."""
        with capture_logs() as logs:
            scorer.score(base_inputs)

        events = [log["event"] for log in logs]
        assert events.count("readiness_scoring_step") == 5
        assert events[-1] == "readiness_scored"
        assert logs[-1]["band"] == "ready"

    def test_verify_uses_configured_iterations(self, scorer: ReadinessScorer, base_inputs: dict):
        """Default depth comes from ScoringConfig."""
        assert scorer.verify(base_inputs).iterations == 5
        assert scorer.verify(base_inputs, iterations=2).iterations == 2
