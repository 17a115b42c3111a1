"""Point tables for the LPPSA readiness formula.

Four independently capped components add up to a 0-100 advisory score:

A. Rule Coverage (0-30)
   - Appointment: tetap=20, kontrak=8, unset=0
   - Service years: 5+=10, 3-4=6, 0-2=2
   - Age penalty: 50-55=-2, 56+=-5
B. Income Pattern (0-25)
   - Base points by income band (5-18)
   - Consistency bonus: tetap=7, kontrak=3
C. Commitment Signal (0-25)
   - Declared DSR band: 0-30=25, 31-40=18, 41-50=10, 51+=4
D. Property Context (0-20)
   - Price-to-annual-income multiple: <5x=20, <7x=15, <10x=10, else 5
   - Existing LPPSA loan: -8

The score is advisory only. It is never an eligibility decision.
"""

from decimal import Decimal

from .models.readiness import (
    AgeRange,
    CommitmentRange,
    EmploymentType,
    ExistingLoan,
    IncomeRange,
    ReadinessBand,
    ServiceYears,
)


# =============================================================================
# VERSION TRACKING
# =============================================================================

METHODOLOGY_VERSION = "v3.6.1"


# =============================================================================
# A. RULE COVERAGE
# =============================================================================

RULE_COVERAGE_MAX = 30

EMPLOYMENT_POINTS = {
    EmploymentType.PERMANENT: 20,
    EmploymentType.CONTRACT: 8,
    EmploymentType.UNSET: 0,
}

SERVICE_YEARS_POINTS = {
    ServiceYears.FIVE_PLUS: 10,
    ServiceYears.THREE_TO_FOUR: 6,
    ServiceYears.ZERO_TO_TWO: 2,
}

# Shorter remaining tenure before retirement
AGE_PENALTY = {
    AgeRange.UNDER_35: 0,
    AgeRange.FROM_35_TO_49: 0,
    AgeRange.FROM_50_TO_55: -2,
    AgeRange.FROM_56: -5,
}


# =============================================================================
# B. INCOME PATTERN
# =============================================================================

INCOME_PATTERN_MAX = 25

INCOME_BASE_POINTS = {
    IncomeRange.ABOVE_8000: 18,
    IncomeRange.FROM_6001_TO_8000: 15,
    IncomeRange.FROM_5001_TO_6000: 12,
    IncomeRange.FROM_4001_TO_5000: 9,
    IncomeRange.FROM_3001_TO_4000: 6,
    IncomeRange.UP_TO_3000: 5,
}

CONSISTENCY_BONUS = {
    EmploymentType.PERMANENT: 7,
    EmploymentType.CONTRACT: 3,
    EmploymentType.UNSET: 0,
}


# =============================================================================
# C. COMMITMENT SIGNAL
# =============================================================================

COMMITMENT_SIGNAL_MAX = 25

COMMITMENT_POINTS = {
    CommitmentRange.UP_TO_30: 25,
    CommitmentRange.FROM_31_TO_40: 18,
    CommitmentRange.FROM_41_TO_50: 10,
    CommitmentRange.ABOVE_50: 4,
}

# Percentage used as the DSR estimate for each declared band
COMMITMENT_MIDPOINTS = {
    CommitmentRange.UP_TO_30: 15,
    CommitmentRange.FROM_31_TO_40: 35,
    CommitmentRange.FROM_41_TO_50: 45,
    CommitmentRange.ABOVE_50: 60,
}


# =============================================================================
# D. PROPERTY CONTEXT
# =============================================================================

PROPERTY_CONTEXT_MAX = 20

REFERENCE_PROPERTY_PRICE = Decimal("450000")

# Monthly income (RM) assumed for each declared band
INCOME_MIDPOINTS = {
    IncomeRange.ABOVE_8000: 10000,
    IncomeRange.FROM_6001_TO_8000: 7000,
    IncomeRange.FROM_5001_TO_6000: 5500,
    IncomeRange.FROM_4001_TO_5000: 4500,
    IncomeRange.FROM_3001_TO_4000: 3500,
    IncomeRange.UP_TO_3000: 2500,
}

# (exclusive upper multiple, points), checked in order
PRICE_MULTIPLE_TIERS = (
    (Decimal("5"), 20),
    (Decimal("7"), 15),
    (Decimal("10"), 10),
)
PRICE_MULTIPLE_FLOOR_POINTS = 5

EXISTING_LOAN_PENALTY = {
    ExistingLoan.YES: 8,
    ExistingLoan.NO: 0,
    ExistingLoan.UNSET: 0,
}


def get_income_midpoint(income_range: IncomeRange) -> int:
    """Get the assumed monthly income for a declared band."""
    return INCOME_MIDPOINTS[income_range]


def get_price_multiple_points(multiple: Decimal) -> int:
    """Get Property Context base points for a price-to-income multiple."""
    for ceiling, points in PRICE_MULTIPLE_TIERS:
        if multiple < ceiling:
            return points
    return PRICE_MULTIPLE_FLOOR_POINTS


# =============================================================================
# BAND TEXT
# =============================================================================

BAND_TEXT = {
    ReadinessBand.READY: (
        "READY TO CONTINUE",
        "Anda boleh meneruskan ke proses tempahan dan penyediaan dokumen.",
    ),
    ReadinessBand.CAUTION: (
        "CONTINUE WITH CAUTION",
        "Anda boleh meneruskan dengan perhatian kepada item yang ditandakan.",
    ),
    ReadinessBand.NOT_READY: (
        "NOT READY TO PROCEED",
        "Sila selesaikan perkara yang ditandakan sebelum meneruskan.",
    ),
}


def get_band_text(band: ReadinessBand) -> tuple[str, str]:
    """Get (label, guidance) for a band."""
    return BAND_TEXT[band]
