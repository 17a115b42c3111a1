"""Shared fixtures for snang-core tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest

from snang_core.models import (
    BuyerInfo,
    Case,
    CasePhase,
    DocStatus,
    Document,
    KJStatus,
    Property,
    PropertyType,
    QueryRisk,
    ReadinessInputs,
    TacSchedule,
)
from snang_core.readiness import calculate_readiness

CREATED_AT = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

# Values that must never reach a buyer or agent payload
RAW_SALARY = Decimal("4567.89")
RAW_CONFIDENCE = 0.8731
TAC_CODE = "TAC-884213"
BUYER_IC = "880515-14-5678"
BUYER_EMAIL = "ahmad.razak@example.my"


@pytest.fixture
def base_inputs() -> dict:
    """Permanent officer, 5+ years, 35-49, RM 4,001-5,000, low commitment."""
    return {
        "employment_type": "tetap",
        "employment_scheme": "persekutuan",
        "service_years": "5+",
        "age_range": "35-49",
        "income_range": "4001-5000",
        "commitment_range": "0-30",
        "existing_loan": "no",
        "property_price": 450000,
    }


@pytest.fixture
def make_case(base_inputs: dict) -> Callable[..., Case]:
    """Factory for fully populated cases, including every sensitive field."""

    def _make(
        case_id: str = "case-001",
        phase: CasePhase = CasePhase.DOCS_PENDING,
        buyer_name: str = "Ahmad bin Razak",
        buyer_phone: str = "012-3456789",
        processing_days: int = 3,
        **overrides,
    ) -> Case:
        fields = dict(
            id=case_id,
            buyer=BuyerInfo(
                id=f"buyer-{case_id}",
                name=buyer_name,
                phone=buyer_phone,
                ic=BUYER_IC,
                email=BUYER_EMAIL,
                basic_salary=RAW_SALARY,
                income_range="RM 4,001 - RM 5,000",
                occupation="Guru DG44",
                employer="Kementerian Pendidikan Malaysia",
                grade="DG44",
            ),
            property=Property(
                name="Residensi Harmoni",
                unit="A-12-03",
                price=Decimal("450000"),
                type=PropertyType.NEW_PROJECT,
                location="Kajang, Selangor",
            ),
            phase=phase,
            loan_type="Pembelian Rumah Siap",
            loan_type_code=1,
            readiness=calculate_readiness(ReadinessInputs(**base_inputs)),
            documents=[
                Document(
                    id="doc-1",
                    type="salary_slip",
                    name="Slip Gaji Jan 2026.pdf",
                    status=DocStatus.UPLOADED,
                    confidence=RAW_CONFIDENCE,
                ),
                Document(
                    id="doc-2",
                    type="ic",
                    name="MyKad.jpg",
                    status=DocStatus.VERIFIED,
                    confidence=0.95,
                ),
                Document(
                    id="doc-3",
                    type="offer_letter",
                    name="Surat Tawaran.pdf",
                    status=DocStatus.PENDING,
                ),
            ],
            tac_schedule=TacSchedule(
                date="2026-02-10",
                time="10:30",
                confirmed=True,
                confirmed_at="2026-02-10T10:31:00+08:00",
                code=TAC_CODE,
            ),
            kj_status=KJStatus.PENDING,
            kj_days=4,
            lo_expiry=14,
            query_risk=QueryRisk.LOW,
            created_at=CREATED_AT,
            updated_at=CREATED_AT + timedelta(days=processing_days),
        )
        fields.update(overrides)
        return Case(**fields)

    return _make


def _walk(value, keys: set, leaves: list) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            keys.add(key)
            _walk(item, keys, leaves)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _walk(item, keys, leaves)
    else:
        leaves.append(value)


@pytest.fixture
def payload_contents() -> Callable[[object], tuple[set, list]]:
    """Return every key and every leaf value of a JSON-like payload."""

    def _collect(payload) -> tuple[set, list]:
        keys: set = set()
        leaves: list = []
        _walk(payload, keys, leaves)
        return keys, leaves

    return _collect


@pytest.fixture
def sensitive_values() -> dict:
    """Raw values planted in make_case that no human role may receive."""
    return {
        "salary": RAW_SALARY,
        "confidence": RAW_CONFIDENCE,
        "tac_code": TAC_CODE,
        "ic": BUYER_IC,
        "email": BUYER_EMAIL,
    }
