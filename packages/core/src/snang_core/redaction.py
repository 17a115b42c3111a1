"""Role projections of a case.

Every projection is built field by field into a frozen view model. Nothing
is copied wholesale and then pruned, so a field added to Case later stays
invisible until a view declares it.

What each role receives:
- buyer: own case status, property, advisory readiness, document status,
  TAC appointment (no code)
- agent: as buyer plus priority, buyer identity with income range only,
  confidence labels, KJ and query-risk signals, loan type
- developer: nothing per case (aggregates only, see aggregation.py)
- system: full copy for internal processing
"""

from typing import Optional, Union

import structlog

from .labels import confidence_to_label
from .models import (
    AdvisoryResult,
    AgentBuyerView,
    AgentCaseView,
    AgentDocumentView,
    BuyerCaseView,
    BuyerDocumentView,
    Case,
    Document,
    Role,
    ScoredResult,
    TacSchedule,
    TacScheduleView,
)
from .permissions import parse_role

logger = structlog.get_logger()

ProjectedCase = Union[BuyerCaseView, AgentCaseView, Case]


def advisory_view(scored: Optional[ScoredResult]) -> Optional[AdvisoryResult]:
    """Public shape of a readiness result: band, label and guidance."""
    if scored is None:
        return None
    return AdvisoryResult(
        band=scored.band,
        label=scored.label,
        guidance=scored.guidance,
    )


def _tac_view(tac: Optional[TacSchedule]) -> Optional[TacScheduleView]:
    if tac is None:
        return None
    return TacScheduleView(
        date=tac.date,
        time=tac.time,
        confirmed=tac.confirmed,
        confirmed_at=tac.confirmed_at,
    )


def _buyer_document(doc: Document) -> BuyerDocumentView:
    return BuyerDocumentView(id=doc.id, type=doc.type, name=doc.name, status=doc.status)


def _agent_document(doc: Document) -> AgentDocumentView:
    label = confidence_to_label(doc.confidence) if doc.confidence is not None else None
    return AgentDocumentView(
        id=doc.id,
        type=doc.type,
        name=doc.name,
        status=doc.status,
        confidence_label=label,
    )


def project_for_buyer(case: Case) -> BuyerCaseView:
    """Buyer's view of their own case."""
    return BuyerCaseView(
        id=case.id,
        phase=case.phase,
        property=case.property.model_copy(),
        readiness=advisory_view(case.readiness),
        documents=[_buyer_document(doc) for doc in case.documents],
        tac_schedule=_tac_view(case.tac_schedule),
        created_at=case.created_at,
        updated_at=case.updated_at,
    )


def project_for_agent(case: Case) -> AgentCaseView:
    """
    Agent's view of a case.

    The buyer's income comes from the stored range label; the exact
    salary field is never read here.
    """
    buyer = case.buyer
    return AgentCaseView(
        id=case.id,
        phase=case.phase,
        priority=case.priority,
        property=case.property.model_copy(),
        buyer=AgentBuyerView(
            id=buyer.id,
            name=buyer.name,
            phone=buyer.phone,
            occupation=buyer.occupation,
            income_range=buyer.income_range,
        ),
        readiness=advisory_view(case.readiness),
        documents=[_agent_document(doc) for doc in case.documents],
        tac_schedule=_tac_view(case.tac_schedule),
        kj_status=case.kj_status,
        kj_days=case.kj_days,
        lo_expiry=case.lo_expiry,
        query_risk=case.query_risk,
        loan_type=case.loan_type,
        created_at=case.created_at,
        updated_at=case.updated_at,
    )


def project_for_role(case: Case, role: Union[Role, str, None]) -> Optional[ProjectedCase]:
    """
    Project a case for a role.

    Args:
        case: Case as loaded from storage (not modified)
        role: Authenticated role

    Returns:
        BuyerCaseView, AgentCaseView, a deep copy of the Case for system,
        or None for developer and unknown roles
    """
    parsed = parse_role(role)
    logger.debug("case_projected", role=parsed.value if parsed else "unknown", case_id=case.id)

    if parsed == Role.BUYER:
        return project_for_buyer(case)
    if parsed == Role.AGENT:
        return project_for_agent(case)
    if parsed == Role.SYSTEM:
        return case.model_copy(deep=True)
    # Developer has no per-case visibility; unknown roles fail closed
    return None
