"""Role permission matrices and the access check.

Each role carries four closed sets of resources: what it may view, what it
must never view, what it may act on, and what it must never act on. A
resource is allowed only when it is in the allow set AND absent from the
deny set. Anything the matrices do not name is denied.

Usage:
    from snang_core.permissions import can_access

    can_access("agent", "readiness_band", "view")   # True
    can_access("agent", "tac_code", "view")         # False
    can_access("auditor", "case_status", "view")    # False (unknown role)
"""

from enum import Enum
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict

from .config import PermissionConfig
from .exceptions import ConfigurationError
from .models import Role

logger = structlog.get_logger()


class Action(str, Enum):
    """Kind of access being checked."""
    VIEW = "view"
    ACT = "act"


# Older callers pass "action" for the act column
ACTION_ALIASES = {"action": Action.ACT}


class Resource(str, Enum):
    """Every resource named by any role's permission matrix."""

    # -- Buyer-facing --
    OWN_CASE_STATUS = "own_case_status"
    OWN_DOCUMENTS = "own_documents"
    TIMELINE = "timeline"
    NEXT_ACTION = "next_action"
    UPLOAD_DOCUMENTS = "upload_documents"
    AUTHORIZE_AGENT = "authorize_agent"
    CONFIRM_TAC = "confirm_tac"
    RESPOND_QUERY = "respond_query"

    # -- Case processing --
    CASE_STATUS = "case_status"
    READINESS_BAND = "readiness_band"
    DOCUMENT_COMPLETENESS = "document_completeness"
    TAC_TIMESTAMP = "tac_timestamp"
    EMPLOYMENT_TYPE = "employment_type"
    INCOME_RANGE = "income_range"
    QUERY_SIGNALS = "query_signals"
    CREATE_LINK = "create_link"
    SCHEDULE_TAC = "schedule_tac"
    FLAG_CORRECTIONS = "flag_corrections"
    SUBMIT_TO_LPPSA = "submit_to_lppsa"
    SEND_REMINDERS = "send_reminders"

    # -- Project level --
    PROJECT_SUMMARY = "project_summary"
    AGGREGATE_COUNTS = "aggregate_counts"
    CONVERSION_RATES = "conversion_rates"
    STATUS_DISTRIBUTION = "status_distribution"
    CREATE_BULK_LINKS = "create_bulk_links"
    ASSIGN_AGENTS = "assign_agents"
    VIEW_ANALYTICS = "view_analytics"

    # -- Sensitive (denied to human roles) --
    SCORING_BREAKDOWN = "scoring_breakdown"
    RISK_FLAGS = "risk_flags"
    INTERNAL_STATE = "internal_state"
    INCOME_CALCULATIONS = "income_calculations"
    OTHER_CASES = "other_cases"
    RAW_DOCUMENTS = "raw_documents"
    EXACT_SALARY = "exact_salary"
    TAC_CODE = "tac_code"
    CONFIDENCE_PERCENTAGE = "confidence_percentage"
    INDIVIDUAL_BUYER_DATA = "individual_buyer_data"
    CASE_DETAILS = "case_details"
    DOCUMENTS = "documents"
    READINESS_SCORES = "readiness_scores"
    BUYER_NAMES = "buyer_names"
    BUYER_CONTACT = "buyer_contact"
    EDIT_FORM_FIELDS = "edit_form_fields"
    SUBMIT_LPPSA = "submit_lppsa"
    VIEW_SCORING_BREAKDOWN = "view_scoring_breakdown"
    APPROVE_REJECT = "approve_reject"
    VIEW_TAC_CODE = "view_tac_code"
    OVERRIDE_BUYER = "override_buyer"
    MAKE_ELIGIBILITY_DECISION = "make_eligibility_decision"
    VIEW_BUYER_DATA = "view_buyer_data"
    PROCESS_APPLICATIONS = "process_applications"
    ACCESS_CASE_DETAILS = "access_case_details"

    # -- System --
    ALL_FOR_PROCESSING = "all_for_processing"
    DETECT = "detect"
    FLAG = "flag"
    NOTIFY = "notify"
    LOG = "log"
    COMPUTE = "compute"
    ASSEMBLE = "assemble"
    DECIDE = "decide"
    SUBMIT = "submit"
    APPROVE = "approve"
    OVERRIDE = "override"
    ACCESS_LPPSA = "access_lppsa"


class PermissionMatrix(BaseModel):
    """Allow and deny sets for one role."""

    model_config = ConfigDict(frozen=True)

    can_view: frozenset[Resource] = frozenset()
    cannot_view: frozenset[Resource] = frozenset()
    can_act: frozenset[Resource] = frozenset()
    cannot_act: frozenset[Resource] = frozenset()

    def allows(self, resource: Resource, action: Action) -> bool:
        """Allowed iff listed in the allow set and not in the deny set."""
        if action == Action.VIEW:
            return resource in self.can_view and resource not in self.cannot_view
        if action == Action.ACT:
            return resource in self.can_act and resource not in self.cannot_act
        return False

    def permitted(self, action: Action) -> frozenset[Resource]:
        if action == Action.VIEW:
            return self.can_view - self.cannot_view
        if action == Action.ACT:
            return self.can_act - self.cannot_act
        return frozenset()

    def conflicts(self) -> dict[Action, frozenset[Resource]]:
        """Resources listed in both the allow and deny set of an action."""
        found = {
            Action.VIEW: self.can_view & self.cannot_view,
            Action.ACT: self.can_act & self.cannot_act,
        }
        return {action: resources for action, resources in found.items() if resources}


R = Resource

ROLE_PERMISSIONS: dict[Role, PermissionMatrix] = {
    Role.BUYER: PermissionMatrix(
        can_view=frozenset({R.OWN_CASE_STATUS, R.OWN_DOCUMENTS, R.TIMELINE, R.NEXT_ACTION}),
        cannot_view=frozenset({
            R.SCORING_BREAKDOWN, R.RISK_FLAGS, R.INTERNAL_STATE,
            R.INCOME_CALCULATIONS, R.OTHER_CASES,
        }),
        can_act=frozenset({R.UPLOAD_DOCUMENTS, R.AUTHORIZE_AGENT, R.CONFIRM_TAC, R.RESPOND_QUERY}),
        cannot_act=frozenset({
            R.CREATE_LINK, R.EDIT_FORM_FIELDS, R.SUBMIT_LPPSA, R.VIEW_SCORING_BREAKDOWN,
        }),
    ),
    Role.AGENT: PermissionMatrix(
        can_view=frozenset({
            R.CASE_STATUS, R.READINESS_BAND, R.DOCUMENT_COMPLETENESS, R.TAC_TIMESTAMP,
            R.EMPLOYMENT_TYPE, R.INCOME_RANGE, R.QUERY_SIGNALS,
        }),
        cannot_view=frozenset({
            R.RAW_DOCUMENTS, R.EXACT_SALARY, R.TAC_CODE,
            R.SCORING_BREAKDOWN, R.CONFIDENCE_PERCENTAGE,
        }),
        can_act=frozenset({
            R.CREATE_LINK, R.SCHEDULE_TAC, R.FLAG_CORRECTIONS,
            R.SUBMIT_TO_LPPSA, R.SEND_REMINDERS,
        }),
        cannot_act=frozenset({
            R.APPROVE_REJECT, R.VIEW_TAC_CODE, R.OVERRIDE_BUYER, R.MAKE_ELIGIBILITY_DECISION,
        }),
    ),
    Role.DEVELOPER: PermissionMatrix(
        can_view=frozenset({
            R.PROJECT_SUMMARY, R.AGGREGATE_COUNTS, R.CONVERSION_RATES, R.STATUS_DISTRIBUTION,
        }),
        cannot_view=frozenset({
            R.INDIVIDUAL_BUYER_DATA, R.CASE_DETAILS, R.DOCUMENTS,
            R.READINESS_SCORES, R.BUYER_NAMES, R.BUYER_CONTACT,
        }),
        can_act=frozenset({R.CREATE_BULK_LINKS, R.ASSIGN_AGENTS, R.VIEW_ANALYTICS}),
        cannot_act=frozenset({R.VIEW_BUYER_DATA, R.PROCESS_APPLICATIONS, R.ACCESS_CASE_DETAILS}),
    ),
    Role.SYSTEM: PermissionMatrix(
        can_view=frozenset({R.ALL_FOR_PROCESSING}),
        can_act=frozenset({R.DETECT, R.FLAG, R.NOTIFY, R.LOG, R.COMPUTE, R.ASSEMBLE}),
        cannot_act=frozenset({R.DECIDE, R.SUBMIT, R.APPROVE, R.OVERRIDE, R.ACCESS_LPPSA}),
    ),
}

del R


# =============================================================================
# PARSING
# =============================================================================

def parse_role(value: Union[Role, str, None]) -> Optional[Role]:
    """Resolve a role value, or None when it is not a known role."""
    try:
        return Role(value)
    except (ValueError, TypeError):
        return None


def parse_resource(value: Union[Resource, str, None]) -> Optional[Resource]:
    try:
        return Resource(value)
    except (ValueError, TypeError):
        return None


def parse_action(value: Union[Action, str, None]) -> Optional[Action]:
    if isinstance(value, str) and value in ACTION_ALIASES:
        return ACTION_ALIASES[value]
    try:
        return Action(value)
    except (ValueError, TypeError):
        return None


# =============================================================================
# ACCESS CHECKS
# =============================================================================

def can_access(
    role: Union[Role, str, None],
    resource: Union[Resource, str, None],
    action: Union[Action, str, None] = Action.VIEW,
) -> bool:
    """
    Check whether a role may view or act on a resource.

    Explicit deny wins over allow. Unknown roles, resources and actions are
    denied without raising.

    Args:
        role: Role or role string
        resource: Resource or resource string
        action: "view" or "act"

    Returns:
        True only for an explicitly allowed, non-denied resource
    """
    matrix = ROLE_PERMISSIONS.get(parse_role(role))
    parsed_resource = parse_resource(resource)
    parsed_action = parse_action(action)

    if matrix is None or parsed_resource is None or parsed_action is None:
        return False

    return matrix.allows(parsed_resource, parsed_action)


def permitted_resources(
    role: Union[Role, str, None],
    action: Union[Action, str, None] = Action.VIEW,
) -> frozenset[Resource]:
    """All resources a role may access for an action (empty when unknown)."""
    matrix = ROLE_PERMISSIONS.get(parse_role(role))
    parsed_action = parse_action(action)
    if matrix is None or parsed_action is None:
        return frozenset()
    return matrix.permitted(parsed_action)


def validate_permission_matrices(
    matrices: Optional[dict[Role, PermissionMatrix]] = None,
    strict: Optional[bool] = None,
) -> dict[Role, dict[Action, frozenset[Resource]]]:
    """
    Find resources that are both allowed and denied for the same action.

    Conflicts do not widen access (deny still wins) but usually mean a
    matrix edit went wrong.

    Args:
        matrices: Matrices to check (default: ROLE_PERMISSIONS)
        strict: Raise on conflict (default: SNANG_PERMISSIONS_STRICT_MATRIX)

    Returns:
        Conflicting resources per role and action

    Raises:
        ConfigurationError: If strict and any conflict exists
    """
    if matrices is None:
        matrices = ROLE_PERMISSIONS
    if strict is None:
        strict = PermissionConfig().strict_matrix

    conflicts: dict[Role, dict[Action, frozenset[Resource]]] = {}
    for role, matrix in matrices.items():
        found = matrix.conflicts()
        if not found:
            continue
        conflicts[role] = found
        for action, resources in found.items():
            logger.warning(
                "permission_matrix_conflict",
                role=role.value,
                action=action.value,
                resources=sorted(r.value for r in resources),
            )

    if conflicts and strict:
        first_role = next(iter(conflicts))
        raise ConfigurationError(
            f"Permission matrix for '{first_role.value}' allows and denies the same resource",
            config_key="SNANG_PERMISSIONS_STRICT_MATRIX",
            expected="disjoint allow and deny sets",
            actual=str({
                role.value: {a.value: sorted(r.value for r in res) for a, res in found.items()}
                for role, found in conflicts.items()
            }),
        )

    return conflicts
